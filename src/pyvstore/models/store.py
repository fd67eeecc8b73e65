"""Daily storefront models."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from pydantic import AliasChoices, Field

from pyvstore.models._base import Timestamp, VStoreBaseModel


class StoreSkin(VStoreBaseModel):
    """A skin offered in the daily storefront."""

    id: str = Field(default="", validation_alias=AliasChoices("id", "uuid"))
    display_name: str = ""
    display_icon: str = ""
    cost: dict[str, int] = Field(default_factory=dict)
    """Price keyed by currency id."""


class DailyStore(VStoreBaseModel):
    """The current account's daily offers and their expiry."""

    skins: list[StoreSkin] = Field(default_factory=list)
    refresh_time: Timestamp = None
    expires: Timestamp = None

    def time_left(self, now: datetime | None = None) -> timedelta | None:
        """Time until the offers rotate, clamped at zero.

        ``None`` when the backend did not report an expiry.
        """
        if self.expires is None:
            return None
        current = now or datetime.now(UTC)
        return max(self.expires - current, timedelta(0))

    def is_expired(self, now: datetime | None = None) -> bool:
        left = self.time_left(now)
        return left is not None and left <= timedelta(0)

    def format_time_left(self, now: datetime | None = None) -> str:
        """``"5h 3m 12s"``, ``"Expired"`` or ``""`` when unknown."""
        left = self.time_left(now)
        if left is None:
            return ""
        if left <= timedelta(0):
            return "Expired"
        total = int(left.total_seconds())
        hours, rest = divmod(total, 3600)
        minutes, seconds = divmod(rest, 60)
        return f"{hours}h {minutes}m {seconds}s"
