"""Internal constants shared across the library."""

STORE_BASE_URL = "https://firestore.googleapis.com/v1"
IDENTITY_BASE_URL = "https://identitytoolkit.googleapis.com/v1"
TOKEN_BASE_URL = "https://securetoken.googleapis.com/v1"
USER_AGENT = "pybusfleet"

DEFAULT_DRIVER_EMAIL_DOMAIN = "busapp.com"

# ------------------------------------------------------------------
# Document store collections
# ------------------------------------------------------------------

DRIVERS = "drivers"
BUSES = "buses"
ROUTES = "routes"
LOCATIONS = "locations"
COLLECTIONS: frozenset[str] = frozenset({DRIVERS, BUSES, ROUTES, LOCATIONS})

# ------------------------------------------------------------------
# Identity provider error messages
# ------------------------------------------------------------------

INVALID_CREDENTIAL_CODES: frozenset[str] = frozenset(
    {"EMAIL_NOT_FOUND", "INVALID_PASSWORD", "INVALID_LOGIN_CREDENTIALS", "USER_DISABLED"}
)
SESSION_EXPIRED_CODES: frozenset[str] = frozenset(
    {"TOKEN_EXPIRED", "INVALID_ID_TOKEN", "INVALID_REFRESH_TOKEN", "USER_NOT_FOUND"}
)
RATE_LIMIT_CODES: frozenset[str] = frozenset({"TOO_MANY_ATTEMPTS_TRY_LATER"})
ACCOUNT_EXISTS_CODES: frozenset[str] = frozenset({"EMAIL_EXISTS"})
WEAK_PASSWORD_CODES: frozenset[str] = frozenset({"WEAK_PASSWORD"})
