"""Internal constants shared across the library."""

BASE_URL = "http://localhost:3000/api"
USER_AGENT = "pyvstore"
LOGIN_PATH = "/auth/login"
TOKEN_STORAGE_KEY = "valorant_token"

# ------------------------------------------------------------------
# Backend endpoints
# ------------------------------------------------------------------

AUTH_GENERATE_URL = "/auth/generate-url"
AUTH_CALLBACK = "/auth/callback"
AUTH_PROFILE = "/auth/profile"
AUTH_REFRESH = "/auth/refresh"
AUTH_SESSIONS = "/auth/sessions"
AUTH_SWITCH = "/auth/switch"
AUTH_LOGOUT = "/auth/logout"
STORE_DAILY = "/store/daily"
STORE_HISTORY = "/store/history"
GAME_DATA_SKINS = "/game-data/skins"
GAME_DATA_BUNDLES = "/game-data/bundles"
GAME_DATA_HEALTH = "/game-data/health"

# ------------------------------------------------------------------
# Failure markers carried in ``ApiResponse.error``
# ------------------------------------------------------------------

NETWORK_ERROR = "network_error"
UNAUTHORIZED = "unauthorized"
INVALID_RESPONSE = "invalid_response"
MALFORMED_CALLBACK = "malformed_callback"

HTTP_UNAUTHORIZED = 401
