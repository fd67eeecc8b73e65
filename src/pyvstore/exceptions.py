"""Custom exception hierarchy for pyvstore.

Public gateway and extractor calls report expected failures through
typed values (``ApiResponse``, ``MalformedCallback``).  The exceptions
below are raised internally by the transport and storage layers, and by
the opt-in helpers ``ApiResponse.unwrap`` and ``parse_callback_url``.
"""

from __future__ import annotations


class VStoreError(Exception):
    """Base exception for all pyvstore errors."""


class VStoreConfigError(VStoreError):
    """Invalid or missing configuration."""


class VStoreStorageError(VStoreError):
    """Durable token slot could not be read or written."""


class VStoreTransportError(VStoreError):
    """No usable HTTP response (connection failure, timeout)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class VStoreApiError(VStoreError):
    """Backend answered with ``success: false`` (application-level error)."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message)


class VStoreUnauthorizedError(VStoreApiError):
    """Backend rejected the session token (HTTP 401).

    By the time this is raised the gateway has already evicted the token.
    """


class MalformedCallbackError(VStoreError):
    """Callback URL does not carry the required provider tokens."""

    def __init__(self, message: str, *, missing: tuple[str, ...] = ()) -> None:
        self.missing = missing
        super().__init__(message)
