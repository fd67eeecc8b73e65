"""Client-side session state machine.

:class:`SessionController` is the authoritative answer to "who is logged
in right now".  It is the only writer of the current profile and of the
active-session registry snapshot, and it routes every network call
through :class:`~pyvstore.gateway.ApiGateway`.

Stale results
-------------
Two counters guard against late responses:

* ``generation`` changes on every identity change (adopt, logout,
  eviction).  Background work (profile refresh, registry refresh)
  captures it before suspending and drops its result if it moved.
* the operation ticket changes whenever an identity-changing operation
  (login, switch, logout) starts.  A login or switch adopts its result
  only if no newer identity operation has started since.
"""

from __future__ import annotations

import logging

from pyvstore._redact import redact_url
from pyvstore.callback import MalformedCallback, extract_credentials
from pyvstore.events import SessionInvalidated
from pyvstore.gateway import ApiGateway
from pyvstore.models.envelope import ApiResponse
from pyvstore.models.profile import AuthResult, UserSession
from pyvstore.models.sessions import SessionRegistry
from pyvstore.polling import PeriodicPoller

_logger = logging.getLogger(__name__)

CHECK_CALLBACK_MESSAGE = "Login failed. Please check your callback URL."


class SessionController:
    """Login, logout, account switching and profile refresh.

    Parameters
    ----------
    gateway : ApiGateway
        Entered gateway used for every backend call.  The controller
        subscribes to its session-invalidated event so an evicted token
        always takes the profile with it.
    """

    def __init__(self, gateway: ApiGateway) -> None:
        self._gateway = gateway
        self._user: UserSession | None = None
        self._registry: SessionRegistry | None = None
        self._generation = 0
        self._operation = 0
        self._pending = 0
        self._initializing = True
        self._initialized = False
        self._last_error: str | None = None
        self._unsubscribe = gateway.subscribe(self._on_session_invalidated)

    # ------------------------------------------------------------------
    # Read state
    # ------------------------------------------------------------------

    @property
    def user(self) -> UserSession | None:
        return self._user

    @property
    def token(self) -> str | None:
        """Session token of the adopted identity.

        ``None`` while a persisted token is still being verified during
        :meth:`initialize`, so token and profile are always seen together.
        """
        if self._user is None:
            return None
        return self._gateway.token

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None and self._gateway.token is not None

    @property
    def loading(self) -> bool:
        """True during initialize, login and switch; refresh runs in the background."""
        return self._initializing or self._pending > 0

    @property
    def registry(self) -> SessionRegistry | None:
        return self._registry

    @property
    def last_error(self) -> str | None:
        """Inline message for the most recent failed login or switch."""
        return self._last_error

    @property
    def generation(self) -> int:
        return self._generation

    # ------------------------------------------------------------------
    # Identity transitions (synchronous, never interleaved)
    # ------------------------------------------------------------------

    def _adopt(self, result: AuthResult) -> None:
        # set_token first: if the durable write fails nothing changes.
        self._gateway.set_token(result.token)
        self._user = result.user
        self._generation += 1
        self._last_error = None
        _logger.info("Adopted session for %s (%s)", result.user.riot_id or result.user.id, result.user.id)

    def _discard_identity(self) -> None:
        self._user = None
        self._registry = None
        self._generation += 1
        self._gateway.clear_token()

    def _on_session_invalidated(self, event: SessionInvalidated) -> None:
        if self._user is not None:
            _logger.info("Session invalidated by %s; signing out", event.endpoint)
        self._user = None
        self._registry = None
        self._generation += 1

    def _begin_operation(self) -> int:
        self._operation += 1
        return self._operation

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> bool:
        """Restore a persisted session.  Runs once; later calls are no-ops.

        Any failure to load the profile (rejected token, malformed
        response, network error) settles into the unauthenticated state.

        Returns
        -------
        bool
            Whether a session was restored.
        """
        if self._initialized:
            return self.is_authenticated
        self._initialized = True
        generation = self._generation
        try:
            stored = self._gateway.load_persisted_token()
            if not stored:
                return False
            self._gateway.set_token(stored)
            response = await self._gateway.get_profile()
            if generation != self._generation:
                _logger.debug("Identity changed while restoring session; dropping restored profile")
                return self.is_authenticated
            if response.success and response.data is not None:
                self._user = response.data
                self._generation += 1
                return True
            _logger.info("Persisted session rejected: %s", response.describe())
            self._discard_identity()
            return False
        except Exception:
            _logger.warning("Restoring persisted session failed", exc_info=True)
            if generation == self._generation:
                self._discard_quietly()
            return False
        finally:
            self._initializing = False

    def _discard_quietly(self) -> None:
        try:
            self._discard_identity()
        except Exception:
            _logger.exception("Clearing local session failed")

    def _finish_exchange(self, label: str, call: ApiResponse[AuthResult], ticket: int) -> bool:
        if ticket != self._operation:
            _logger.debug("%s result superseded by a newer identity operation", label)
            return False
        if not call.success or call.data is None:
            self._last_error = call.describe()
            _logger.info("%s failed: %s", label, self._last_error)
            return False
        self._adopt(call.data)
        return True

    async def login(self, callback_url: str) -> bool:
        """Exchange a provider callback URL for a backend session.

        The callback is checked locally first; the backend performs the
        actual exchange.  Never raises: every failure returns ``False``,
        sets :attr:`last_error` and leaves any previous session untouched.
        """
        self._last_error = None
        credentials = extract_credentials(callback_url)
        if isinstance(credentials, MalformedCallback):
            _logger.info("Rejected callback %s: %s", redact_url(str(callback_url)), credentials.reason)
            self._last_error = CHECK_CALLBACK_MESSAGE
            return False

        ticket = self._begin_operation()
        self._pending += 1
        try:
            response = await self._gateway.process_callback(callback_url.strip())
            return self._finish_exchange("Login", response, ticket)
        except Exception:
            _logger.exception("Login error")
            self._last_error = "Login failed. Please try again."
            return False
        finally:
            self._pending -= 1

    async def switch_account(self, account_id: str) -> bool:
        """Make *account_id* the active session.

        The previous account's backend session stays live, so switching
        back does not require logging in again.  Never raises.
        """
        self._last_error = None
        if not account_id:
            self._last_error = "No account selected"
            return False

        ticket = self._begin_operation()
        self._pending += 1
        try:
            response = await self._gateway.switch_account(account_id)
            return self._finish_exchange("Switch account", response, ticket)
        except Exception:
            _logger.exception("Switch account error")
            self._last_error = "Switch failed. Please try again."
            return False
        finally:
            self._pending -= 1

    async def logout(self) -> None:
        """Tell the backend, then clear local state no matter what it said."""
        self._begin_operation()
        try:
            if self._gateway.token is not None:
                response = await self._gateway.logout()
                if not response.success:
                    _logger.info("Backend logout failed: %s", response.describe())
        except Exception:
            _logger.exception("Logout error")
        finally:
            self._discard_quietly()

    async def refresh_profile(self) -> None:
        """Ask the backend to refresh its data, then reload the profile.

        No-op when unauthenticated.  Failures are logged and never sign
        the user out; results for an identity that is no longer active
        are dropped.
        """
        user = self._user
        if user is None or self._gateway.token is None:
            return
        generation = self._generation
        try:
            refreshed = await self._gateway.refresh_data()
            if not refreshed.success:
                _logger.warning("Refresh failed for %s: %s", user.id, refreshed.describe())
                return
            if generation != self._generation:
                _logger.debug("Identity changed during refresh; skipping profile reload for %s", user.id)
                return
            response = await self._gateway.get_profile()
            if generation != self._generation:
                _logger.debug("Dropping stale profile for %s", user.id)
                return
            if not response.success or response.data is None:
                _logger.warning("Profile reload failed for %s: %s", user.id, response.describe())
                return
            if response.data.id != user.id:
                _logger.warning("Profile reload returned %s while %s is active; ignoring", response.data.id, user.id)
                return
            self._user = response.data
        except Exception:
            _logger.warning("Refresh error", exc_info=True)

    async def refresh_sessions(self) -> SessionRegistry | None:
        """Reload the active-session registry.

        Returns the current snapshot; unchanged when unauthenticated, on
        failure, or when the identity changed while the call was pending.
        """
        if self._user is None or self._gateway.token is None:
            return self._registry
        generation = self._generation
        try:
            response = await self._gateway.get_all_sessions()
        except Exception:
            _logger.warning("Failed to load sessions", exc_info=True)
            return self._registry
        if generation != self._generation:
            _logger.debug("Dropping stale session registry")
        elif response.success and response.data is not None:
            self._registry = response.data
        else:
            _logger.info("Failed to load sessions: %s", response.describe())
        return self._registry

    def sessions_poller(self, interval: float | None = None) -> PeriodicPoller:
        """Unstarted poller that keeps :attr:`registry` fresh."""
        return PeriodicPoller(
            "sessions",
            self.refresh_sessions,
            interval or self._gateway.config.sessions_poll_interval,
        )

    def close(self) -> None:
        """Detach from the gateway's invalidation event."""
        self._unsubscribe()
