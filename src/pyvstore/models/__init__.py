"""Data models for backend API responses."""

from pyvstore.models._base import Timestamp, VStoreBaseModel, parse_timestamp
from pyvstore.models.envelope import ApiResponse
from pyvstore.models.game_data import CacheStats, CatalogItem, GameDataHealth
from pyvstore.models.profile import AccountXP, AuthResult, AuthUrl, Balance, UserSession
from pyvstore.models.sessions import SessionDescriptor, SessionRegistry
from pyvstore.models.store import DailyStore, StoreSkin

__all__ = [
    "AccountXP",
    "ApiResponse",
    "AuthResult",
    "AuthUrl",
    "Balance",
    "CacheStats",
    "CatalogItem",
    "DailyStore",
    "GameDataHealth",
    "SessionDescriptor",
    "SessionRegistry",
    "StoreSkin",
    "Timestamp",
    "UserSession",
    "VStoreBaseModel",
    "parse_timestamp",
]
