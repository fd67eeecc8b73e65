"""Provider callback URL parsing.

The identity provider redirects to a URL such as::

    https://playvalorant.com/opt_in#access_token=...&id_token=...&token_type=Bearer&expires_in=3600

Depending on the response mode the parameters arrive in the fragment or
in the query.  :func:`extract_credentials` accepts either and performs
no I/O.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qs, urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pyvstore._constants import MALFORMED_CALLBACK
from pyvstore.exceptions import MalformedCallbackError

REQUIRED_PARAMETERS: tuple[str, ...] = ("access_token", "id_token")


class CallbackCredentials(BaseModel):
    """Raw provider tokens extracted from a callback URL.

    Transient: handed to the backend exchange and discarded.  Token
    values are kept out of ``repr`` so they cannot leak into logs.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(repr=False)
    id_token: str = Field(repr=False)
    token_type: str = "Bearer"
    expires_in: int | None = None
    scope: str | None = None

    @field_validator("expires_in", mode="before")
    @classmethod
    def _coerce_expires_in(cls, value: Any) -> int | None:
        try:
            return int(value)
        except (TypeError, ValueError):
            return None


class MalformedCallback(BaseModel):
    """Typed failure returned when required parameters are missing."""

    model_config = ConfigDict(frozen=True)

    reason: str
    missing: tuple[str, ...] = ()
    error: str = MALFORMED_CALLBACK

    def to_error(self) -> MalformedCallbackError:
        return MalformedCallbackError(self.reason, missing=self.missing)


def _components(text: str) -> list[str]:
    """Return the parameter-bearing components of *text*, lowest priority first."""
    parts = urlsplit(text)
    if not parts.scheme and not parts.netloc and not parts.query and not parts.fragment:
        # Bare "access_token=...&id_token=..." pasted without the URL.
        return [text.lstrip("#?")]

    components = [parts.query]
    fragment = parts.fragment
    # SPA-style "#/route?access_token=..." fragments.
    if fragment.startswith("/") and "?" in fragment:
        fragment = fragment.split("?", 1)[1]
    components.append(fragment)
    return [c for c in components if c]


def _parameters(text: str) -> dict[str, str]:
    params: dict[str, str] = {}
    for component in _components(text):
        for key, values in parse_qs(component).items():
            if values and values[0].strip():
                params[key] = values[0].strip()
    return params


def extract_credentials(callback_url: str) -> CallbackCredentials | MalformedCallback:
    """Locate the provider tokens in *callback_url*.

    Fragment values win over query values when both are present.
    Values are URL-decoded and unknown parameters are ignored.

    Returns
    -------
    CallbackCredentials or MalformedCallback
        The decoded tokens, or a typed failure naming what is missing.
    """
    if not isinstance(callback_url, str) or not callback_url.strip():
        return MalformedCallback(reason="Callback URL is empty", missing=REQUIRED_PARAMETERS)

    params = _parameters(callback_url.strip())
    missing = tuple(name for name in REQUIRED_PARAMETERS if name not in params)
    if missing:
        return MalformedCallback(
            reason=f"Callback URL is missing {', '.join(missing)}",
            missing=missing,
        )

    return CallbackCredentials(
        access_token=params["access_token"],
        id_token=params["id_token"],
        token_type=params.get("token_type", "Bearer"),
        expires_in=params.get("expires_in"),
        scope=params.get("scope"),
    )


def parse_callback_url(callback_url: str) -> CallbackCredentials:
    """Like :func:`extract_credentials` but raise on failure.

    Raises
    ------
    MalformedCallbackError
        If the callback does not carry both tokens.
    """
    result = extract_credentials(callback_url)
    if isinstance(result, MalformedCallback):
        raise result.to_error()
    return result
