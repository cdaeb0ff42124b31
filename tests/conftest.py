# tests/conftest.py
"""
Global pytest fixtures for avocado-client tests.

HTTP is served by httpx.MockTransport; FakeAvocado routes requests by
(method, path) and records every request it sees.
"""

from collections.abc import Callable

import httpx
import pytest

from avocado_client import AvocadoClient, RateLimiter

DEV_ID = "dev-42"
DEV_KEY = "dev-secret"
SESSION_TOKEN = "abc123token"
SET_COOKIE = f"user_email={SESSION_TOKEN}; Path=/; HttpOnly"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeAvocado:
    """Scriptable stand-in for the Avocado API."""

    def __init__(self):
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, handler: Handler | None = None, **kwargs):
        """
        Register a route for METHOD /api/<path>.

        Pass a handler, or httpx.Response keyword arguments to answer with
        a fresh response on every call.
        """
        if handler is None:
            handler = lambda request: httpx.Response(**kwargs)  # noqa: E731
        self.routes[(method, "/api/" + path)] = handler

    def login_ok(self, set_cookie: str = SET_COOKIE):
        self.add("POST", "authentication/login", status_code=200, headers={"Set-Cookie": set_cookie})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"error": "no route"})
        return handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def fake_api():
    return FakeAvocado()


@pytest.fixture
def rate_limiter():
    return RateLimiter(max_requests=10000, enabled=True)


@pytest.fixture
async def client(fake_api, rate_limiter):
    """An unauthenticated client talking to FakeAvocado."""
    async with AvocadoClient(
        DEV_ID,
        DEV_KEY,
        rate_limiter=rate_limiter,
        transport=httpx.MockTransport(fake_api),
    ) as client:
        yield client


@pytest.fixture
async def logged_in(client, fake_api):
    """A client that has already logged in."""
    fake_api.login_ok()
    assert await client.login("a@b.com", "pw") is True
    return client


def make_user(user_id: str = "u1", **overrides) -> dict:
    user = {
        "id": user_id,
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": f"{user_id}@example.com",
        "createTime": 1354320000000,
        "birthday": 0,
        "lastReadTime": 1354320001000,
        "currentCoupleId": "c1",
        "avatarUrl": "https://example.com/a.png",
        "avatarImageUrls": {"small": "s.png", "medium": "m.png", "large": "l.png"},
        "verified": True,
        "options": {"pushNotifications": True},
        "googleCalendarAccessToken": None,
        "googleInfo": {"sub": "123"},
        "oldestValidCookie": None,
        "deleted": False,
    }
    user.update(overrides)
    return user


def make_activity(activity_id: str, activity_type: str) -> dict:
    return {
        "id": activity_id,
        "type": activity_type,
        "timeCreated": 1354320000000,
        "userId": "u1",
        "data": {"text": f"{activity_type} {activity_id}"},
    }
