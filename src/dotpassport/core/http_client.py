"""Async client for the DotPassport API.

Plain resource methods always hit the network. The ``get_widget_*`` methods
use the consolidated widget endpoints and go through the shared widget
cache first.
"""

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .cache import CacheKey, WidgetCache, get_widget_cache, make_cache_key
from .config import API_PREFIX, get_default_base_url
from .errors import ConfigurationError, DotPassportError, RequestCancelled
from .models import (
    BadgeData,
    BadgeDefinitions,
    CategoryDefinitions,
    SpecificCategoryScore,
    SpecificUserBadge,
    UserBadges,
    UserProfile,
    UserScores,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_TIMEOUT = httpx.Timeout(30.0, connect=15.0)


class CancellationSignal:
    """Abort handle for in-flight requests.

    Pass it to a ``get_widget_*`` call; ``cancel()`` aborts the request and
    the call raises RequestCancelled.
    """

    def __init__(self):
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self):
        self._event.set()

    async def wait(self):
        await self._event.wait()


class DotPassportClient:
    """Client for the DotPassport reputation API.

    Args:
        api_key: API key sent as ``X-API-Key`` on every request (required)
        base_url: API root; defaults to ``get_default_base_url()``
        custom_headers: Extra headers merged into every request
        cache: Widget cache; defaults to the process-wide instance
        transport: Optional httpx transport (tests, proxies)
        timeout: httpx timeout for each request
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        custom_headers: Optional[Mapping[str, str]] = None,
        cache: Optional[WidgetCache] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: httpx.Timeout = _TIMEOUT,
    ):
        if not api_key:
            raise ConfigurationError("API key is required")

        self.api_key = api_key
        self.base_url = (base_url or get_default_base_url()).rstrip("/")
        self.cache = cache if cache is not None else get_widget_cache()
        self._headers = {
            "X-API-Key": api_key,
            "Content-Type": "application/json",
            **dict(custom_headers or {}),
        }
        self._transport = transport
        self._timeout = timeout
        self._http: Optional[httpx.AsyncClient] = None

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                base_url=self.base_url + API_PREFIX,
                headers=self._headers,
                timeout=self._timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._http

    async def aclose(self):
        if self._http is not None and not self._http.is_closed:
            await self._http.aclose()

    async def __aenter__(self) -> "DotPassportClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        """GET path and unwrap the ``{success, data}`` envelope.

        Every failure leaves here as a DotPassportError.
        """
        try:
            response = await self.http.get(path, params=params)
        except httpx.RequestError as e:
            raise DotPassportError(str(e) or type(e).__name__) from e

        if response.is_error:
            body = _decode_body(response)
            message = body.get("message") if isinstance(body, dict) else None
            raise DotPassportError(
                message or f"{response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                response=body,
            )

        body = _decode_body(response)
        if not isinstance(body, dict) or "data" not in body:
            raise DotPassportError(
                "Malformed API response",
                status_code=response.status_code,
                response=body,
            )
        return body["data"]

    async def _get(
        self,
        path: str,
        params: Optional[Dict[str, str]] = None,
        signal: Optional[CancellationSignal] = None,
    ) -> Any:
        if signal is None:
            return await self._request(path, params)
        if signal.cancelled:
            raise RequestCancelled(path)

        request = asyncio.ensure_future(self._request(path, params))
        waiter = asyncio.ensure_future(signal.wait())
        try:
            done, _ = await asyncio.wait({request, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not request.done():
                request.cancel()
                await asyncio.wait({request})

        if request in done:
            return request.result()
        logger.debug("Request cancelled: %s", path)
        raise RequestCancelled(path)

    async def _get_model(self, model: Type[M], path: str, params=None, signal=None) -> M:
        data = await self._get(path, params, signal)
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise DotPassportError(f"Malformed {model.__name__} payload", response=data) from e

    async def _get_cached(
        self,
        key: CacheKey,
        model: Type[M],
        path: str,
        params: Optional[Dict[str, str]],
        signal: Optional[CancellationSignal],
        force_refresh: bool,
    ) -> M:
        # Check cache first
        if not force_refresh:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("✅ Cache hit: %s", key)
                return cached

        logger.debug("📡 Fetching: %s", path)
        result = await self._get_model(model, path, params, signal)

        # Only successes are cached
        self.cache.set(key, result)
        return result

    # ------------------------------------------------------------------
    # Cache control
    # ------------------------------------------------------------------

    def clear_cache(self):
        """Clear all cached widget data (shared by every client using this cache)."""
        self.cache.clear()

    def clear_cache_for_address(self, address: str):
        """Clear cached widget data for one address."""
        self.cache.clear_by_address(address)

    # ------------------------------------------------------------------
    # Resource endpoints
    # ------------------------------------------------------------------

    async def get_profile(self, address: str, signal: Optional[CancellationSignal] = None) -> UserProfile:
        return await self._get_model(UserProfile, f"/profiles/{address}", signal=signal)

    async def get_scores(self, address: str, signal: Optional[CancellationSignal] = None) -> UserScores:
        return await self._get_model(UserScores, f"/scores/{address}", signal=signal)

    async def get_category_score(
        self, address: str, category_key: str, signal: Optional[CancellationSignal] = None
    ) -> SpecificCategoryScore:
        return await self._get_model(SpecificCategoryScore, f"/scores/{address}/{category_key}", signal=signal)

    async def get_badges(self, address: str, signal: Optional[CancellationSignal] = None) -> UserBadges:
        return await self._get_model(UserBadges, f"/badges/{address}", signal=signal)

    async def get_badge(
        self, address: str, badge_key: str, signal: Optional[CancellationSignal] = None
    ) -> SpecificUserBadge:
        return await self._get_model(SpecificUserBadge, f"/badges/{address}/{badge_key}", signal=signal)

    async def get_badge_definitions(self) -> BadgeDefinitions:
        return await self._get_model(BadgeDefinitions, "/metadata/badges")

    async def get_category_definitions(self) -> CategoryDefinitions:
        return await self._get_model(CategoryDefinitions, "/metadata/categories")

    # ------------------------------------------------------------------
    # Widget endpoints (single consolidated call, cached)
    # ------------------------------------------------------------------

    async def get_widget_reputation(
        self,
        address: str,
        *,
        signal: Optional[CancellationSignal] = None,
        force_refresh: bool = False,
    ) -> UserScores:
        key = make_cache_key("reputation", address)
        return await self._get_cached(
            key, UserScores, f"/widget/reputation/{address}", None, signal, force_refresh
        )

    async def get_widget_profile(
        self,
        address: str,
        *,
        signal: Optional[CancellationSignal] = None,
        force_refresh: bool = False,
    ) -> UserProfile:
        key = make_cache_key("profile", address)
        return await self._get_cached(
            key, UserProfile, f"/widget/profile/{address}", None, signal, force_refresh
        )

    async def get_widget_badges(
        self,
        address: str,
        badge_key: Optional[str] = None,
        *,
        signal: Optional[CancellationSignal] = None,
        force_refresh: bool = False,
    ) -> BadgeData:
        """Badge widget data: a single badge when badge_key is given, else all earned badges."""
        params = {"badgeKey": badge_key} if badge_key else None
        key = make_cache_key("badge", address, params)
        model = SpecificUserBadge if badge_key else UserBadges
        return await self._get_cached(
            key, model, f"/widget/badge/{address}", params, signal, force_refresh
        )

    async def get_widget_category(
        self,
        address: str,
        category_key: str,
        *,
        signal: Optional[CancellationSignal] = None,
        force_refresh: bool = False,
    ) -> SpecificCategoryScore:
        params = {"categoryKey": category_key}
        key = make_cache_key("category", address, params)
        return await self._get_cached(
            key, SpecificCategoryScore, f"/widget/category/{address}", params, signal, force_refresh
        )


def _decode_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
