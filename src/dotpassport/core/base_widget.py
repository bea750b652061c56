"""Base widget: fetch -> render lifecycle shared by every widget."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, Mapping, Optional, Tuple, Type, TypeVar, Union

from bs4 import BeautifulSoup
from bs4.element import Tag
from jinja2 import Environment, PackageLoader, select_autoescape
from pydantic import ValidationError

from .config import BaseWidgetConfig
from .errors import ConfigurationError, DotPassportError, RequestCancelled, WidgetNotMountedError
from .http_client import CancellationSignal, DotPassportClient
from .utils import (
    ColorSchemeProvider,
    add_class,
    badge_icon,
    capitalize_first,
    format_date,
    format_number,
    inner_html,
    remove_class,
    resolve_container,
    resolve_theme,
    set_inner_html,
    truncate_text,
)

logger = logging.getLogger(__name__)

TConfig = TypeVar("TConfig", bound=BaseWidgetConfig)
TData = TypeVar("TData")

# Autoescape is on for every template: widget data comes from the API
_env = Environment(
    loader=PackageLoader("dotpassport", "templates"),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
_env.filters.update(
    format_number=format_number,
    format_date=format_date,
    truncate_text=truncate_text,
    badge_icon=badge_icon,
    capitalize_first=capitalize_first,
)


@dataclass(frozen=True)
class WidgetState(Generic[TData]):
    """Widget state. Build it with the classmethods, never field by field.

    Once mounted, exactly one of loading / error / data is set.
    """

    loading: bool = False
    error: Optional[BaseException] = None
    data: Optional[TData] = None

    @classmethod
    def unmounted(cls) -> "WidgetState":
        return cls()

    @classmethod
    def pending(cls) -> "WidgetState":
        return cls(loading=True)

    @classmethod
    def failed(cls, error: BaseException) -> "WidgetState":
        return cls(error=error)

    @classmethod
    def ready(cls, data: TData) -> "WidgetState":
        return cls(data=data)

    @property
    def phase(self) -> str:
        if self.loading:
            return "loading"
        if self.error is not None:
            return "error"
        if self.data is not None:
            return "ready"
        return "unmounted"


class BaseWidget(ABC, Generic[TConfig, TData]):
    """Abstract base class for all widgets.

    Handles mounting, data fetching, state transitions, rendering and
    error handling. Subclasses provide ``fetch_data`` and ``render``.

    Every fetch-initiating call (mount, address-changing update, refresh)
    bumps a generation counter and cancels the previous request; a result
    is only applied if its generation is still current, so an older fetch
    can never overwrite a newer one.

    Args:
        config: Config model or mapping validated against ``config_class``
        client: Shared API client; one is built from the config when omitted
        document: Parsed host page, used to resolve selector strings on mount
        prefers_dark: Host color-scheme query used when theme is "auto"
    """

    config_class: Type[BaseWidgetConfig] = BaseWidgetConfig
    widget_type = "base"
    # Config fields whose change means the held data is for the wrong resource
    fetch_fields: Tuple[str, ...] = ("address",)

    def __init__(
        self,
        config: Union[TConfig, Mapping[str, Any]],
        *,
        client: Optional[DotPassportClient] = None,
        document: Optional[BeautifulSoup] = None,
        prefers_dark: Optional[ColorSchemeProvider] = None,
    ):
        self.config: TConfig = self._coerce_config(config)
        self._owns_client = client is None
        self.client = client or self._build_client()
        self.document = document
        self.prefers_dark = prefers_dark
        self.container: Optional[Tag] = None
        self._state: WidgetState = WidgetState.unmounted()
        self._generation = 0
        self._signal: Optional[CancellationSignal] = None

    # ------------------------------------------------------------------
    # Public lifecycle
    # ------------------------------------------------------------------

    async def mount(self, target: Union[str, Tag]):
        """Mount the widget into a container and load its data.

        Args:
            target: CSS selector (resolved against ``document``) or a Tag
        """
        container = resolve_container(target, self.document)
        if self.container is not None:
            self._detach()

        self.container = container
        if self.config.class_name:
            add_class(container, self.config.class_name)

        await self._load()

    async def update(self, **changes: Any):
        """Replace config fields and re-render.

        A change to ``fetch_fields`` (or to the API credentials) re-fetches;
        anything else re-renders the current state with no network call.
        """
        if self.container is None:
            raise WidgetNotMountedError("Widget not mounted")

        old = self.config
        values = {name: getattr(old, name) for name in type(old).model_fields}
        values.update(changes)
        new = self._coerce_config(values)

        credentials_changed = (old.api_key, old.base_url) != (new.api_key, new.base_url)
        if credentials_changed and not self._owns_client:
            raise ConfigurationError(
                "api_key and base_url cannot change on a widget using a shared client"
            )
        self.config = new

        if old.class_name != self.config.class_name:
            if old.class_name:
                remove_class(self.container, old.class_name)
            if self.config.class_name:
                add_class(self.container, self.config.class_name)

        if credentials_changed:
            # Invalidate the in-flight fetch before suspending on aclose
            self._generation += 1
            if self._signal is not None:
                self._signal.cancel()
                self._signal = None
            await self.client.aclose()
            self.client = self._build_client()

        if credentials_changed or any(getattr(old, f) != getattr(self.config, f) for f in self.fetch_fields):
            await self._load()
        else:
            self._update_dom()

    async def refresh(self, force: bool = False):
        """Re-run the fetch path. Cached data is reused unless ``force`` is set."""
        if self.container is None:
            raise WidgetNotMountedError("Widget not mounted")
        await self._load(force_refresh=force)

    def destroy(self):
        """Cancel pending requests, clear the container and drop all state."""
        self._generation += 1
        if self._signal is not None:
            self._signal.cancel()
            self._signal = None
        self._detach()
        self._state = WidgetState.unmounted()

    def unmount(self):
        """Alias for destroy()."""
        self.destroy()

    async def aclose(self):
        """Destroy the widget and close the API client if this widget created it."""
        self.destroy()
        if self._owns_client:
            await self.client.aclose()

    @property
    def state(self) -> WidgetState:
        return self._state

    @property
    def is_mounted(self) -> bool:
        return self.container is not None

    @property
    def inner_html(self) -> str:
        """Current container markup ("" when unmounted)."""
        if self.container is None:
            return ""
        return inner_html(self.container)

    @property
    def theme(self) -> str:
        """Resolved theme; re-evaluated on every render."""
        return resolve_theme(self.config.theme, self.prefers_dark)

    # ------------------------------------------------------------------
    # Subclass contract
    # ------------------------------------------------------------------

    @abstractmethod
    async def fetch_data(self, signal: CancellationSignal, force_refresh: bool = False) -> TData:
        """Fetch the widget's data from the API."""

    @abstractmethod
    def render(self) -> str:
        """Render markup for ``self.state.data``."""

    def render_template(self, template_name: str, **context: Any) -> str:
        context.setdefault("theme", self.theme)
        return _env.get_template(template_name).render(**context)

    def render_loading(self) -> str:
        return self.render_template("widgets/loading.html")

    def render_error(self) -> str:
        error = self._state.error
        if isinstance(error, DotPassportError):
            message = error.message
        else:
            message = str(error) if error else ""
        return self.render_template(
            "widgets/error.html",
            message=message or "An unexpected error occurred",
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _coerce_config(self, config: Union[TConfig, Mapping[str, Any]]) -> TConfig:
        if isinstance(config, self.config_class):
            return config
        if isinstance(config, BaseWidgetConfig):
            config = {name: getattr(config, name) for name in type(config).model_fields}
        try:
            return self.config_class.model_validate(config)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid {self.widget_type} widget config: {e}") from e

    def _build_client(self) -> DotPassportClient:
        return DotPassportClient(api_key=self.config.api_key, base_url=self.config.base_url)

    async def _load(self, force_refresh: bool = False):
        self._generation += 1
        generation = self._generation
        if self._signal is not None:
            self._signal.cancel()
        signal = self._signal = CancellationSignal()

        self._transition(WidgetState.pending())

        try:
            data = await self.fetch_data(signal, force_refresh=force_refresh)
        except RequestCancelled:
            # Superseded or destroyed; the newer operation owns the state
            logger.debug("[%s] Fetch cancelled", type(self).__name__)
            return
        except Exception as error:
            if generation != self._generation:
                return
            self._signal = None
            logger.error("[%s] Error: %s", type(self).__name__, error)
            self._transition(WidgetState.failed(error))
            if self.config.on_error:
                self.config.on_error(error)
            return

        if generation != self._generation:
            logger.debug("[%s] Discarding stale result", type(self).__name__)
            return
        self._signal = None
        self._transition(WidgetState.ready(data))

        # A render failure has already reported through on_error
        if self._state.error is None and self.config.on_load:
            self.config.on_load()

    def _transition(self, state: WidgetState):
        self._state = state
        self._update_dom()

    def _update_dom(self):
        """Replace the container markup with the current state's rendering."""
        if self.container is None:
            return

        state = self._state
        failure = None
        if state.loading:
            markup = self.render_loading()
        elif state.error is not None:
            markup = self.render_error()
        elif state.data is not None:
            try:
                markup = self.render()
            except Exception as render_error:
                logger.exception("[%s] Render error", type(self).__name__)
                failure = render_error
                self._state = WidgetState.failed(render_error)
                markup = self.render_error()
        else:
            markup = ""

        set_inner_html(self.container, markup)
        if failure is not None and self.config.on_error:
            self.config.on_error(failure)

    def _detach(self):
        if self.container is None:
            return
        set_inner_html(self.container, "")
        if self.config.class_name:
            remove_class(self.container, self.config.class_name)
        self.container = None
