from __future__ import annotations

import asyncio
import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from pyvstore._transport import TransportResponse
from pyvstore.config import VStoreConfig
from pyvstore.exceptions import VStoreTransportError
from pyvstore.gateway import ApiGateway
from pyvstore.storage import MemoryTokenStore

CALLBACK_URL = "https://host/opt_in#access_token=AAA&id_token=BBB&token_type=Bearer"

USERS: dict[str, dict[str, Any]] = {
    "u1": {"id": "u1", "username": "Foo", "gameName": "Foo", "tagLine": "NA1", "region": "na"},
    "u2": {
        "id": "u2",
        "username": "Bar",
        "gameName": "Bar",
        "tagLine": "EUW",
        "region": "eu",
        "balance": {"valorantPoints": 1000, "radianitePoints": 20, "kingdomCredits": 5},
        "accountXP": {"level": 42, "xp": 1300},
    },
    "u3": {"id": "u3", "username": "Baz", "gameName": "Baz", "tagLine": "AP1", "region": "ap"},
}

TOKENS: dict[str, str] = {"u1": "T1", "u2": "T2", "u3": "T3"}

TOKEN_BEARING = frozenset(
    {
        "/auth/profile",
        "/auth/refresh",
        "/auth/sessions",
        "/auth/switch",
        "/auth/logout",
        "/store/daily",
    }
)


def _ok(data: Any = None) -> TransportResponse:
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    return TransportResponse(status=200, body=body)


def _fail(error: str, status: int = 200) -> TransportResponse:
    return TransportResponse(status=status, body={"success": False, "error": error})


def _bearer(headers: Mapping[str, str]) -> str | None:
    for key, value in headers.items():
        if key.lower() == "authorization" and value.startswith("Bearer "):
            return value[len("Bearer ") :]
    return None


@dataclass
class RecordedCall:
    method: str
    endpoint: str
    headers: dict[str, str]
    json_body: Any
    params: dict[str, str]

    @property
    def token(self) -> str | None:
        return _bearer(self.headers)


@dataclass
class Hold:
    """Parks one call to an endpoint until released."""

    arrived: asyncio.Event = field(default_factory=asyncio.Event)
    release: asyncio.Event = field(default_factory=asyncio.Event)


@dataclass
class FakeBackend:
    users: dict[str, dict[str, Any]] = field(default_factory=lambda: copy.deepcopy(USERS))
    live: set[str] = field(default_factory=lambda: {"u2", "u3"})
    callback_user: str = "u1"
    callback_error: str | None = None
    calls: list[RecordedCall] = field(default_factory=list)
    holds: dict[str, Hold] = field(default_factory=dict)
    network_down: set[str] = field(default_factory=set)
    reject: set[str] = field(default_factory=set)
    overrides: dict[str, TransportResponse] = field(default_factory=dict)

    def hold(self, endpoint: str) -> Hold:
        hold = Hold()
        self.holds[endpoint] = hold
        return hold

    def endpoints(self) -> list[str]:
        return [call.endpoint for call in self.calls]

    def count(self, endpoint: str) -> int:
        return self.endpoints().count(endpoint)

    def _user_for(self, token: str | None) -> str | None:
        for user_id, issued in TOKENS.items():
            if issued == token and user_id in self.live:
                return user_id
        return None

    def _issue(self, user_id: str) -> TransportResponse:
        self.live.add(user_id)
        return _ok({"token": TOKENS[user_id], "user": self.users[user_id]})

    def _descriptor(self, user_id: str) -> dict[str, Any]:
        user = self.users[user_id]
        return {
            "username": user["username"],
            "gameName": user["gameName"],
            "tagLine": user["tagLine"],
            "createdAt": "2026-10-19T08:00:00Z",
            "lastActivity": 1792400000000,
        }

    async def send(
        self,
        method: str,
        endpoint: str,
        *,
        headers: Mapping[str, str],
        json_body: Any = None,
        params: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        call = RecordedCall(method, endpoint, dict(headers), json_body, dict(params or {}))
        self.calls.append(call)
        # Every request suspends at least once, like a real network call.
        await asyncio.sleep(0)

        hold = self.holds.pop(endpoint, None)
        if hold is not None:
            hold.arrived.set()
            await hold.release.wait()

        if endpoint in self.network_down:
            raise VStoreTransportError(f"Request to {endpoint} failed: connection refused", endpoint=endpoint)
        if endpoint in self.overrides:
            return self.overrides[endpoint]
        if endpoint in self.reject:
            return _fail("Unauthorized", status=401)

        user_id = self._user_for(call.token)
        if endpoint in TOKEN_BEARING and user_id is None:
            return _fail("Unauthorized", status=401)

        if endpoint == "/auth/generate-url":
            return _ok({"authUrl": "https://auth.riotgames.com/authorize?client_id=play-valorant-web-prod"})
        if endpoint == "/auth/callback":
            if self.callback_error is not None:
                return _fail(self.callback_error)
            if "access_token" not in str((json_body or {}).get("callbackUrl", "")):
                return _fail("invalid_callback")
            return self._issue(self.callback_user)
        if endpoint == "/auth/profile":
            return _ok(self.users[user_id])
        if endpoint == "/auth/refresh":
            balance = self.users[user_id].setdefault(
                "balance",
                {"valorantPoints": 0, "radianitePoints": 0, "kingdomCredits": 0},
            )
            balance["valorantPoints"] += 100
            return _ok({"refreshed": True})
        if endpoint == "/auth/sessions":
            sessions = {uid: self._descriptor(uid) for uid in sorted(self.live)}
            return _ok({"sessions": sessions, "count": len(sessions)})
        if endpoint == "/auth/switch":
            target = (json_body or {}).get("targetUserId")
            if target not in self.live:
                return _fail("session_not_found")
            return self._issue(target)
        if endpoint == "/auth/logout":
            self.live.discard(user_id)
            return _ok()
        if endpoint == "/store/daily":
            return _ok(
                {
                    "skins": [
                        {
                            "uuid": "skin-1",
                            "displayName": "Prime Vandal",
                            "displayIcon": "https://media.valorant-api.com/skin-1.png",
                            "cost": {"85ad13f7": 1775},
                        }
                    ],
                    "refreshTime": "2026-10-19T00:00:00Z",
                    "expires": "2026-10-20T00:00:00Z",
                }
            )
        if endpoint == "/game-data/health":
            return _ok({"initialized": True, "cacheStats": {"skins": True, "bundles": True, "version": True}})

        raise AssertionError(f"Unexpected endpoint in fake backend: {endpoint}")


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def store() -> MemoryTokenStore:
    return MemoryTokenStore()


@pytest.fixture
def config() -> VStoreConfig:
    return VStoreConfig(base_url="http://backend.test/api")


@pytest.fixture
def redirects() -> list[str]:
    return []


@pytest.fixture
def gateway(
    config: VStoreConfig,
    backend: FakeBackend,
    store: MemoryTokenStore,
    redirects: list[str],
) -> ApiGateway:
    return ApiGateway(
        config,
        store=store,
        transport=backend,
        on_session_invalidated=lambda event: redirects.append(event.login_path),
    )
