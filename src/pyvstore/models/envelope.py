"""Uniform response envelope returned by every backend call."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from pyvstore._constants import UNAUTHORIZED
from pyvstore.exceptions import VStoreApiError, VStoreUnauthorizedError

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """``{success, data?, error?, message?}``.

    ``success=False`` with no distinguishing ``error`` is a generic
    failure.  Gateway-generated failures use the markers in
    :mod:`pyvstore._constants` (``network_error``, ``unauthorized``,
    ``invalid_response``).
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    success: bool
    data: T | None = None
    error: str | None = None
    message: str | None = None
    endpoint: str = ""

    @classmethod
    def failure(cls, error: str, message: str | None = None, *, endpoint: str = "") -> ApiResponse[Any]:
        return cls(success=False, error=error, message=message, endpoint=endpoint)

    @property
    def is_unauthorized(self) -> bool:
        return not self.success and self.error == UNAUTHORIZED

    def describe(self) -> str:
        """Short human-readable failure text for inline display."""
        return self.message or self.error or "Request failed"

    def unwrap(self) -> T:
        """Return ``data`` or raise for a failed response.

        Raises
        ------
        VStoreUnauthorizedError
            If the backend rejected the token.
        VStoreApiError
            For any other failure, or a success without data.
        """
        if self.is_unauthorized:
            raise VStoreUnauthorizedError(self.describe(), code=UNAUTHORIZED, endpoint=self.endpoint)
        if not self.success or self.data is None:
            raise VStoreApiError(
                f"{self.endpoint or 'request'} failed: {self.describe()}",
                code=self.error or "",
                endpoint=self.endpoint,
            )
        return self.data
