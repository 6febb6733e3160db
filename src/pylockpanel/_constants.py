"""Internal constants shared across the library."""

BASE_URL = "http://localhost:8000"
USER_AGENT = "pylockpanel/1"
USER_ID_HEADER = "User-Id"

# ------------------------------------------------------------------
# Lock service endpoints
# ------------------------------------------------------------------

GET_NAME_ENDPOINT = "/api/get_name"
SET_NAME_ENDPOINT = "/api/set_name"
STATUS_ENDPOINT = "/api/status"
OPEN_ENDPOINT = "/api/open"
CLOSE_ENDPOINT = "/api/close"

# ------------------------------------------------------------------
# Timings (seconds)
# ------------------------------------------------------------------

DEFAULT_REFRESH_INTERVAL = 60.0
DEFAULT_MESSAGE_TTL = 3.0
DEFAULT_REQUEST_TIMEOUT = 10.0

# ------------------------------------------------------------------
# User-facing texts
# ------------------------------------------------------------------

MSG_REGISTRATION_REQUIRED = "Registration is required to use this panel"
MSG_STATUS_UNAVAILABLE = "Could not read the lock state"
MSG_OPENING = "Opening..."
MSG_OPENED = "Opened"
MSG_OPEN_FAILED = "Open failed"
MSG_CLOSING = "Closing..."
MSG_CLOSED = "Closed"
MSG_CLOSE_FAILED = "Close failed"
MSG_RENAMED = "Display name updated"
MSG_RENAME_FAILED = "Display name update failed"
MSG_STATUS_ESCALATED = "Lock state unavailable after {count} attempts, reload the panel"
