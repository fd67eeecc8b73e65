"""pyvstore - Async client-side session layer for the storefront viewer backend."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyvstore")
except PackageNotFoundError:
    __version__ = "0+local"
from pyvstore.callback import (
    CallbackCredentials,
    MalformedCallback,
    extract_credentials,
    parse_callback_url,
)
from pyvstore.config import VStoreConfig
from pyvstore.controller import SessionController
from pyvstore.events import InvalidationReason, SessionInvalidated
from pyvstore.exceptions import (
    MalformedCallbackError,
    VStoreApiError,
    VStoreConfigError,
    VStoreError,
    VStoreStorageError,
    VStoreTransportError,
    VStoreUnauthorizedError,
)
from pyvstore.gateway import ApiGateway
from pyvstore.models import (
    AccountXP,
    ApiResponse,
    AuthResult,
    AuthUrl,
    Balance,
    CatalogItem,
    DailyStore,
    GameDataHealth,
    SessionDescriptor,
    SessionRegistry,
    StoreSkin,
    UserSession,
)
from pyvstore.polling import PeriodicPoller, health_poller
from pyvstore.storage import FileTokenStore, MemoryTokenStore, TokenStore, token_store_from_config

__all__ = [
    "__version__",
    "AccountXP",
    "ApiGateway",
    "ApiResponse",
    "AuthResult",
    "AuthUrl",
    "Balance",
    "CallbackCredentials",
    "CatalogItem",
    "DailyStore",
    "FileTokenStore",
    "GameDataHealth",
    "InvalidationReason",
    "MalformedCallback",
    "MalformedCallbackError",
    "MemoryTokenStore",
    "PeriodicPoller",
    "SessionController",
    "SessionDescriptor",
    "SessionInvalidated",
    "SessionRegistry",
    "StoreSkin",
    "TokenStore",
    "UserSession",
    "VStoreApiError",
    "VStoreConfig",
    "VStoreConfigError",
    "VStoreError",
    "VStoreStorageError",
    "VStoreTransportError",
    "VStoreUnauthorizedError",
    "extract_credentials",
    "health_poller",
    "parse_callback_url",
    "token_store_from_config",
]
