"""Active session registry models."""

from __future__ import annotations

from typing import Any

from pydantic import Field, model_validator

from pyvstore.models._base import Timestamp, VStoreBaseModel


class SessionDescriptor(VStoreBaseModel):
    """A live backend session for one account."""

    username: str = ""
    game_name: str = ""
    tag_line: str = ""
    created_at: Timestamp = None
    last_activity: Timestamp = None

    @property
    def riot_id(self) -> str:
        if not self.tag_line:
            return self.game_name
        return f"{self.game_name}#{self.tag_line}"


class SessionRegistry(VStoreBaseModel):
    """Every account the backend currently holds a live session for.

    Read-only snapshot; replaced wholesale on refresh.
    """

    sessions: dict[str, SessionDescriptor] = Field(default_factory=dict)
    count: int = 0

    @model_validator(mode="before")
    @classmethod
    def _default_count(cls, values: Any) -> Any:
        if isinstance(values, dict) and values.get("count") is None:
            sessions = values.get("sessions")
            merged = dict(values)
            merged["count"] = len(sessions) if isinstance(sessions, dict) else 0
            return merged
        return values

    def __contains__(self, account_id: object) -> bool:
        return account_id in self.sessions

    def account_ids(self) -> list[str]:
        return list(self.sessions)

    def get(self, account_id: str) -> SessionDescriptor | None:
        return self.sessions.get(account_id)
