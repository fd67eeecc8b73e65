"""Session lifecycle events emitted by the gateway."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class InvalidationReason(StrEnum):
    UNAUTHORIZED = "unauthorized"


class SessionInvalidated(BaseModel):
    """The backend rejected the session token and it has been evicted.

    Hosts subscribe once at startup and navigate to ``login_path``.
    """

    model_config = ConfigDict(frozen=True)

    endpoint: str = Field(..., description="Endpoint whose response triggered the eviction")
    login_path: str
    reason: InvalidationReason = InvalidationReason.UNAUTHORIZED
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
