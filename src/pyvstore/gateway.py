"""Single chokepoint for backend calls.

The gateway owns the session token and its durable mirror, attaches it
to every request, and evicts it on HTTP 401 regardless of which caller
issued the request.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

import aiohttp
from pydantic import TypeAdapter, ValidationError

from pyvstore import _constants as C
from pyvstore._transport import HttpTransport, Transport, TransportResponse
from pyvstore.config import VStoreConfig
from pyvstore.events import SessionInvalidated
from pyvstore.exceptions import VStoreError, VStoreStorageError, VStoreTransportError
from pyvstore.models.envelope import ApiResponse
from pyvstore.models.game_data import CatalogItem, GameDataHealth
from pyvstore.models.profile import AuthResult, AuthUrl, UserSession
from pyvstore.models.sessions import SessionRegistry
from pyvstore.models.store import DailyStore
from pyvstore.storage import TokenStore, token_store_from_config

_logger = logging.getLogger(__name__)

T = TypeVar("T")

SessionInvalidatedListener = Callable[[SessionInvalidated], None]

_AUTH_RESULT = TypeAdapter(AuthResult)
_AUTH_URL = TypeAdapter(AuthUrl)
_USER_SESSION = TypeAdapter(UserSession)
_SESSION_REGISTRY = TypeAdapter(SessionRegistry)
_DAILY_STORE = TypeAdapter(DailyStore)
_STORE_HISTORY = TypeAdapter(list[DailyStore])
_CATALOG = TypeAdapter(list[CatalogItem])
_GAME_DATA_HEALTH = TypeAdapter(GameDataHealth)


def _typed(response: ApiResponse[Any], adapter: TypeAdapter[T]) -> ApiResponse[T]:
    """Validate ``response.data`` into a concrete model."""
    if not response.success:
        return response
    if response.data is None:
        return ApiResponse.failure(
            C.INVALID_RESPONSE,
            "Response carried no data",
            endpoint=response.endpoint,
        )
    try:
        data = adapter.validate_python(response.data)
    except ValidationError as exc:
        _logger.warning("Unexpected %s payload from %s: %s", adapter, response.endpoint, exc)
        return ApiResponse.failure(
            C.INVALID_RESPONSE,
            f"Unexpected response shape from {response.endpoint}",
            endpoint=response.endpoint,
        )
    return ApiResponse(success=True, data=data, message=response.message, endpoint=response.endpoint)


class ApiGateway:
    """Async gateway to the storefront backend.

    Usage::

        async with ApiGateway(config) as gateway:
            gateway.subscribe(lambda event: navigate(event.login_path))
            url = (await gateway.generate_auth_url()).unwrap()
    """

    def __init__(
        self,
        config: VStoreConfig | None = None,
        *,
        store: TokenStore | None = None,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        on_session_invalidated: SessionInvalidatedListener | None = None,
    ) -> None:
        self._config = config or VStoreConfig()
        self._store = store if store is not None else token_store_from_config(self._config)
        self._external_session = session is not None
        self._http_session = session
        self._external_transport = transport is not None
        self._transport: Transport | None = transport
        self._token: str | None = None
        self._listeners: list[SessionInvalidatedListener] = []
        if on_session_invalidated is not None:
            self._listeners.append(on_session_invalidated)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ApiGateway:
        if self._external_transport:
            return self
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    @property
    def config(self) -> VStoreConfig:
        return self._config

    # ------------------------------------------------------------------
    # Token ownership
    # ------------------------------------------------------------------

    @property
    def token(self) -> str | None:
        return self._token

    def load_persisted_token(self) -> str | None:
        """Read the durable slot without adopting it."""
        return self._store.get()

    def set_token(self, token: str) -> None:
        """Adopt *token*, replacing any current one, and persist it.

        The durable write happens first; if it fails the in-memory token
        is left unchanged.
        """
        if not token:
            raise ValueError("token must be non-empty")
        self._store.set(token)
        self._token = token

    def clear_token(self) -> None:
        """Drop the token from memory and durable storage.  Idempotent."""
        self._token = None
        self._store.clear()

    def subscribe(self, listener: SessionInvalidatedListener) -> Callable[[], None]:
        """Register a session-invalidated listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _evict(self, endpoint: str, sent_token: str | None) -> None:
        """Clear the current token after any 401 and notify listeners.

        Fires once per present-to-absent transition, whichever token the
        request carried.  A 401 on a request sent without a token also
        fires.  A 401 for a token that was already evicted is a duplicate
        of the first and is ignored.
        """
        if self._token is None and sent_token is not None:
            _logger.debug("Ignoring duplicate 401 from %s; token already evicted", endpoint)
            return
        _logger.warning("Session rejected by %s; evicting", endpoint)
        self._token = None
        event = SessionInvalidated(endpoint=endpoint, login_path=self._config.login_path)
        try:
            self._store.clear()
        except VStoreStorageError:
            _logger.exception("Could not clear the persisted token after eviction")
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                _logger.exception("Session-invalidated listener %r failed", listener)

    # ------------------------------------------------------------------
    # Request pipeline
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise VStoreError("Gateway not initialized. Use 'async with ApiGateway(...) as gateway:'")
        return self._transport

    def _build_headers(self, headers: Mapping[str, str] | None) -> dict[str, str]:
        merged: dict[str, str] = {
            "content-type": "application/json",
            "user-agent": self._config.user_agent,
        }
        if headers:
            merged.update(headers)
        if self._token:
            for key in [k for k in merged if k.lower() == "authorization"]:
                del merged[key]
            merged["Authorization"] = f"Bearer {self._token}"
        return merged

    @staticmethod
    def _parse_envelope(endpoint: str, response: TransportResponse) -> ApiResponse[Any]:
        body = response.body
        if not isinstance(body, dict):
            error = C.INVALID_RESPONSE if response.ok else f"http_{response.status}"
            return ApiResponse.failure(
                error,
                f"HTTP {response.status} from {endpoint}: {response.text[:200]}",
                endpoint=endpoint,
            )
        try:
            envelope: ApiResponse[Any] = ApiResponse[Any].model_validate({**body, "endpoint": endpoint})
        except ValidationError:
            return ApiResponse.failure(
                C.INVALID_RESPONSE,
                f"Malformed envelope from {endpoint}",
                endpoint=endpoint,
            )
        if not response.ok and envelope.success:
            return envelope.model_copy(
                update={"success": False, "error": envelope.error or f"http_{response.status}"},
            )
        return envelope

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> ApiResponse[Any]:
        """Issue a backend call and return the uniform envelope.

        Never raises for expected failures: network errors, 401s and
        application failures all come back as ``success=False``.
        """
        transport = self._require_transport()
        sent_token = self._token

        try:
            response = await transport.send(
                method,
                endpoint,
                headers=self._build_headers(headers),
                json_body=json,
                params=params,
            )
        except VStoreTransportError as exc:
            _logger.warning("Network error on %s %s: %s", method, endpoint, exc)
            return ApiResponse.failure(C.NETWORK_ERROR, str(exc), endpoint=endpoint)

        if response.status == C.HTTP_UNAUTHORIZED:
            self._evict(endpoint, sent_token)
            message = response.body.get("message") if isinstance(response.body, dict) else None
            return ApiResponse.failure(C.UNAUTHORIZED, message or "Session expired", endpoint=endpoint)

        envelope = self._parse_envelope(endpoint, response)
        if not envelope.success:
            _logger.debug("%s %s failed: error=%s message=%s", method, endpoint, envelope.error, envelope.message)
        return envelope

    # ------------------------------------------------------------------
    # Auth endpoints
    # ------------------------------------------------------------------

    async def generate_auth_url(self) -> ApiResponse[AuthUrl]:
        """Obtain the provider login URL."""
        return _typed(await self.request("GET", C.AUTH_GENERATE_URL), _AUTH_URL)

    async def process_callback(self, callback_url: str) -> ApiResponse[AuthResult]:
        """Exchange the provider callback for a backend token and profile."""
        response = await self.request("POST", C.AUTH_CALLBACK, json={"callbackUrl": callback_url})
        return _typed(response, _AUTH_RESULT)

    async def get_profile(self) -> ApiResponse[UserSession]:
        return _typed(await self.request("GET", C.AUTH_PROFILE), _USER_SESSION)

    async def refresh_data(self) -> ApiResponse[Any]:
        """Ask the backend to recompute its cached data for the current account."""
        return await self.request("POST", C.AUTH_REFRESH)

    async def get_all_sessions(self) -> ApiResponse[SessionRegistry]:
        return _typed(await self.request("GET", C.AUTH_SESSIONS), _SESSION_REGISTRY)

    async def switch_account(self, target_user_id: str) -> ApiResponse[AuthResult]:
        response = await self.request("POST", C.AUTH_SWITCH, json={"targetUserId": target_user_id})
        return _typed(response, _AUTH_RESULT)

    async def logout(self) -> ApiResponse[Any]:
        return await self.request("POST", C.AUTH_LOGOUT)

    # ------------------------------------------------------------------
    # Store and game-data endpoints
    # ------------------------------------------------------------------

    async def get_daily_store(self) -> ApiResponse[DailyStore]:
        return _typed(await self.request("GET", C.STORE_DAILY), _DAILY_STORE)

    async def get_store_history(self, days: int = 7) -> ApiResponse[list[DailyStore]]:
        if days < 1:
            raise ValueError(f"days must be at least 1, got {days}")
        response = await self.request("GET", C.STORE_HISTORY, params={"days": str(days)})
        return _typed(response, _STORE_HISTORY)

    async def get_skins(self) -> ApiResponse[list[CatalogItem]]:
        return _typed(await self.request("GET", C.GAME_DATA_SKINS), _CATALOG)

    async def get_bundles(self) -> ApiResponse[list[CatalogItem]]:
        return _typed(await self.request("GET", C.GAME_DATA_BUNDLES), _CATALOG)

    async def get_game_data_health(self) -> ApiResponse[GameDataHealth]:
        return _typed(await self.request("GET", C.GAME_DATA_HEALTH), _GAME_DATA_HEALTH)
