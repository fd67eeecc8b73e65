"""Game catalogue and cache health models."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from pyvstore.models._base import VStoreBaseModel


class CatalogItem(VStoreBaseModel):
    """A skin or bundle from the game-data catalogue."""

    id: str = Field(default="", validation_alias=AliasChoices("id", "uuid"))
    display_name: str = ""
    display_icon: str = ""


class CacheStats(VStoreBaseModel):
    """Which catalogue caches the backend has populated."""

    skins: bool = False
    bundles: bool = False
    version: bool = False


class GameDataHealth(VStoreBaseModel):
    """Backend game-data cache health, polled on a fixed interval."""

    initialized: bool = False
    cache_stats: CacheStats = Field(default_factory=CacheStats)

    @property
    def healthy(self) -> bool:
        stats = self.cache_stats
        return self.initialized and stats.skins and stats.bundles and stats.version
