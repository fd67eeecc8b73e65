"""Authenticated user profile models."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from pyvstore.models._base import VStoreBaseModel


class Balance(VStoreBaseModel):
    """Wallet counters."""

    valorant_points: int = 0
    radianite_points: int = 0
    kingdom_credits: int = 0


class AccountXP(VStoreBaseModel):
    """Account progression."""

    level: int = 0
    xp: int = 0


class UserSession(VStoreBaseModel):
    """Profile of the authenticated identity.

    Only valid while the gateway holds a session token; the controller
    sets and clears both together.
    """

    id: str = Field(min_length=1)
    """Stable account identifier (PUUID)."""
    username: str = ""
    """Display name."""
    game_name: str = ""
    """Riot ID name part."""
    tag_line: str = ""
    """Riot ID discriminator part."""
    region: str = ""
    """Shard/region code (e.g. ``"na"``)."""
    balance: Balance | None = None
    account_xp: AccountXP | None = Field(
        default=None,
        validation_alias=AliasChoices("accountXP", "accountXp", "account_xp"),
    )

    @property
    def riot_id(self) -> str:
        """``"name#tag"``, or just the name when the tag is unknown."""
        if not self.tag_line:
            return self.game_name
        return f"{self.game_name}#{self.tag_line}"


class AuthResult(VStoreBaseModel):
    """Token/profile pair returned by callback exchange and account switch."""

    token: str = Field(min_length=1, repr=False)
    user: UserSession


class AuthUrl(VStoreBaseModel):
    """Provider login URL to open in a browser."""

    auth_url: str = Field(validation_alias=AliasChoices("authUrl", "auth_url", "url"))
