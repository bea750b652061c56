from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Callable

import httpx
import pytest
from bs4 import BeautifulSoup

from dotpassport import DotPassportClient, clear_global_cache, reset_to_production_url

ADDRESS = "5GrwvaEF5zXb26Fz9rcQpDWS57CtERHpNehXCPcNoHGKutQY"
OTHER_ADDRESS = "5FHneW46xGXgs5mUiveU4sbTyGBzmstUspZC92UhjJM694ty"
BASE_URL = "https://api.test"


def scores_payload(address: str = ADDRESS, total: int = 850) -> dict:
    return {
        "address": address,
        "totalScore": total,
        "calculatedAt": "2025-01-15T10:30:00Z",
        "categories": {
            "longevity": {"score": 200, "reason": "Account age", "title": "Longevity"},
            "txCount": {"score": 150, "reason": "Transactions", "title": "Transaction Count"},
            "governance": {"score": 500, "reason": "Votes", "title": "Governance"},
        },
    }


def profile_payload(address: str = ADDRESS, **overrides: Any) -> dict:
    payload = {
        "address": address,
        "displayName": "Alice",
        "avatarUrl": "https://example.com/alice.png",
        "bio": "Polkadot enthusiast",
        "socialLinks": {"twitter": "https://twitter.com/alice", "github": "https://github.com/alice"},
        "polkadotIdentities": [{"address": address, "display": "alice.dot"}],
    }
    payload.update(overrides)
    return payload


def badges_payload(address: str = ADDRESS, count: int = 2) -> dict:
    badges = [
        {
            "badgeKey": f"badge-{i}",
            "achievedLevel": i + 1,
            "achievedLevelKey": f"level-{i + 1}",
            "achievedLevelTitle": f"Badge {i}",
            "earnedAt": "2025-01-05T00:00:00Z",
        }
        for i in range(count)
    ]
    return {"address": address, "badges": badges, "count": count}


def badge_definition(key: str = "early-adopter") -> dict:
    return {
        "key": key,
        "title": "Early Adopter",
        "shortDescription": "Joined early",
        "longDescription": "Joined during the first year",
        "metric": "accountAge",
        "levels": [
            {
                "level": 1,
                "key": "bronze",
                "value": 1,
                "title": "Bronze Pioneer",
                "shortDescription": "",
                "longDescription": "",
            }
        ],
    }


def category_payload(address: str = ADDRESS, key: str = "longevity") -> dict:
    return {
        "address": address,
        "category": {"key": key, "score": {"score": 200, "reason": "Account age", "title": "Longevity"}},
        "definition": {
            "key": key,
            "displayName": "Longevity",
            "short_description": "How long the account has existed",
            "long_description": "",
            "order": 1,
            "reasons": [
                {
                    "key": f"r{i}",
                    "points": 10 * i,
                    "title": f"Reason {i}",
                    "description": f"Description {i}",
                    "thresholds": [],
                    "advices": [f"Advice {i}a", f"Advice {i}b"],
                }
                for i in range(4)
            ],
        },
        "calculatedAt": "2025-01-15T10:30:00Z",
    }


class FakeApi:
    """Route table behind an httpx.MockTransport; records every request."""

    def __init__(self):
        self.routes: dict[str, Callable[[httpx.Request], Any]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, path: str, data: Any = None, status: int = 200, body: Any = None):
        if body is None:
            body = {"success": status < 400, "data": data}
        self.routes["/api/v2" + path] = lambda request: httpx.Response(status, json=body)

    def add_handler(self, path: str, handler: Callable[[httpx.Request], Any]):
        self.routes["/api/v2" + path] = handler

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"success": False, "message": "Not found"})
        response = route(request)
        if hasattr(response, "__await__"):
            response = await response
        return response

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def count(self, path: str | None = None) -> int:
        if path is None:
            return len(self.requests)
        return sum(1 for r in self.requests if r.url.path == "/api/v2" + path)


class FakeClock:
    def __init__(self):
        self.now = datetime(2025, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float):
        self.now += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def _isolate_global_state():
    clear_global_cache()
    reset_to_production_url()
    yield
    clear_global_cache()
    reset_to_production_url()


@pytest.fixture
def api() -> FakeApi:
    api = FakeApi()
    api.add(f"/widget/reputation/{ADDRESS}", scores_payload())
    api.add(f"/widget/reputation/{OTHER_ADDRESS}", scores_payload(OTHER_ADDRESS, total=120))
    api.add(f"/widget/profile/{ADDRESS}", profile_payload())
    api.add(f"/widget/badge/{ADDRESS}", badges_payload())
    api.add(f"/widget/category/{ADDRESS}", category_payload())
    return api


@pytest.fixture
def client(api: FakeApi) -> DotPassportClient:
    return DotPassportClient(api_key="test-api-key", base_url=BASE_URL, transport=api.transport())


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def document() -> BeautifulSoup:
    return BeautifulSoup(
        '<html><body><div id="widget"></div><div id="other"></div></body></html>',
        "html.parser",
    )
