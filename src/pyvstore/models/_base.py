"""Base model for backend API payloads.

Every response model inherits from :class:`VStoreBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase API keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that drops ``None`` and empty
  string values so the field default is used.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1_000_000_000_000


def parse_timestamp(value: Any) -> datetime | None:
    """Convert an ISO-8601 string or epoch number (s or ms) to a UTC datetime.

    Returns ``None`` when the value is ``None`` or cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, (int, float)):
        ts = int(value)
        if ts >= _MS_THRESHOLD:
            ts = ts // 1000
        return datetime.fromtimestamp(ts, tz=UTC)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.isdigit():
            return parse_timestamp(int(text))
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
    return None


Timestamp = Annotated[datetime | None, BeforeValidator(parse_timestamp)]
"""Annotated type that coerces ISO strings and epoch values to UTC datetimes."""


class VStoreBaseModel(BaseModel):
    """Base for backend response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict, repr=False)
    """Original API response dict."""

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Drop empty values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned = VStoreBaseModel._clean_dict(values)
        # Keep an explicitly passed raw= (kwargs construction).
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
