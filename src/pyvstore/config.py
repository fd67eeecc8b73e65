"""Client configuration for pyvstore."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyvstore._constants import BASE_URL, LOGIN_PATH, TOKEN_STORAGE_KEY, USER_AGENT
from pyvstore.exceptions import VStoreConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise VStoreConfigError(f"{name} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class VStoreConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Backend API base URL, without a trailing slash.
    login_path : str
        Client route of the login entry point.  Carried in every
        session-invalidated event so the host knows where to navigate.
    token_key : str
        Name of the single durable slot holding the session token.
    token_file : str or None
        JSON file backing the durable slot.  ``None`` keeps the token
        in memory only (nothing survives a restart).
    request_timeout : float
        Total per-request timeout in seconds.  A timeout is reported as
        a network error, never as an authorization failure.
    health_poll_interval : float
        Seconds between game-data health polls.
    sessions_poll_interval : float
        Seconds between active-session registry polls.
    api_trace_enabled : bool
        Emit redacted request/response traces at DEBUG level.
    user_agent : str
        ``User-Agent`` header sent with every request.
    """

    base_url: str = BASE_URL
    login_path: str = LOGIN_PATH
    token_key: str = TOKEN_STORAGE_KEY
    token_file: str | None = None
    request_timeout: float = 15.0
    health_poll_interval: float = 60.0
    sessions_poll_interval: float = 30.0
    api_trace_enabled: bool = False
    user_agent: str = USER_AGENT

    def __post_init__(self) -> None:
        if not self.base_url.strip():
            raise VStoreConfigError("base_url must be non-empty")
        if not self.token_key.strip():
            raise VStoreConfigError("token_key must be non-empty")
        for name in ("request_timeout", "health_poll_interval", "sessions_poll_interval"):
            if getattr(self, name) <= 0:
                raise VStoreConfigError(f"{name} must be positive, got {getattr(self, name)}")
        # Endpoints always start with "/", so strip it here once.
        object.__setattr__(self, "base_url", self.base_url.strip().rstrip("/"))

    @classmethod
    def from_env(cls, **overrides: Any) -> VStoreConfig:
        """Create configuration from environment variables.

        Reads optional ``VSTORE_*`` variables.  Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        VStoreConfig
            Populated configuration.

        Raises
        ------
        VStoreConfigError
            If a numeric variable cannot be parsed or a value is invalid.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "VSTORE_API_BASE_URL": "base_url",
            "VSTORE_LOGIN_PATH": "login_path",
            "VSTORE_TOKEN_KEY": "token_key",
            "VSTORE_TOKEN_FILE": "token_file",
            "VSTORE_USER_AGENT": "user_agent",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_FLOAT_MAP = {
            "VSTORE_REQUEST_TIMEOUT": "request_timeout",
            "VSTORE_HEALTH_POLL_INTERVAL": "health_poll_interval",
            "VSTORE_SESSIONS_POLL_INTERVAL": "sessions_poll_interval",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(
                env.get("VSTORE_API_TRACE_ENABLED"),
                False,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
