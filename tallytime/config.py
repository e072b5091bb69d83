"""Application configuration - single source of truth for all constants.

Contains backend settings, validation limits, colors, dimensions and enums.
Import from here instead of hardcoding values elsewhere to ensure consistency across the app.
"""
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent / ".env")


class ConfigurationError(Exception):
    """Raised when the backend endpoint or API key is missing."""
    pass


class AuthMode(Enum):
    """Forms shown on the auth screen."""
    LOGIN = "login"
    REGISTER = "register"
    RESET_REQUEST = "reset_request"
    RESET_CONFIRM = "reset_confirm"


# ============================================================================
# Backend
# ============================================================================

URL_ENV_VARS = ("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL")
ANON_KEY_ENV_VARS = ("SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY")

DEFAULT_HTTP_TIMEOUT = 15.0
DEFAULT_RESET_REDIRECT = "tallytime://reset-password/confirm"

CLIENTS_TABLE = "clients"
TIME_ENTRIES_TABLE = "time_entries"

KEYRING_SERVICE = "tallytime"
KEYRING_SESSION_KEY = "session"


@dataclass(frozen=True)
class BackendConfig:
    """Connection settings for the hosted backend."""
    url: str
    anon_key: str
    timeout: float = DEFAULT_HTTP_TIMEOUT
    reset_redirect: str = DEFAULT_RESET_REDIRECT

    @property
    def rest_url(self) -> str:
        return f"{self.url}/rest/v1"

    @property
    def auth_url(self) -> str:
        return f"{self.url}/auth/v1"


def _first_env(names) -> Optional[str]:
    for name in names:
        value = os.getenv(name, "").strip()
        if value:
            return value
    return None


def load_backend_config() -> BackendConfig:
    """Read backend settings from the environment.

    Raises:
        ConfigurationError: If the endpoint URL or anonymous key is missing.
    """
    url = _first_env(URL_ENV_VARS)
    if not url:
        raise ConfigurationError(
            f"Missing {URL_ENV_VARS[0]} environment variable. "
            "Please check your environment configuration."
        )
    anon_key = _first_env(ANON_KEY_ENV_VARS)
    if not anon_key:
        raise ConfigurationError(
            f"Missing {ANON_KEY_ENV_VARS[0]} environment variable. "
            "Please check your environment configuration."
        )
    try:
        timeout = float(os.getenv("TALLYTIME_HTTP_TIMEOUT", "") or DEFAULT_HTTP_TIMEOUT)
    except ValueError:
        timeout = DEFAULT_HTTP_TIMEOUT
    return BackendConfig(
        url=url.rstrip("/"),
        anon_key=anon_key,
        timeout=timeout,
        reset_redirect=os.getenv("TALLYTIME_RESET_REDIRECT", "") or DEFAULT_RESET_REDIRECT,
    )


LOG_LEVEL = os.getenv("TALLYTIME_LOG_LEVEL", "INFO").upper()

# ============================================================================
# Validation limits
# ============================================================================

MAX_TEXT_LENGTH = 1000
MAX_HOURLY_RATE = 10000
MIN_USER_ID_LENGTH = 10
MAX_ID_LENGTH = 128
FUTURE_TOLERANCE_SECONDS = 60
PASSWORD_MIN_LENGTH = 6

CLIENTS_LIMIT = 1000
TIME_ENTRIES_LIMIT = 10000
EXPORT_ENTRIES_LIMIT = 50000

MS_PER_HOUR = 3_600_000
TICK_INTERVAL_SECONDS = 1.0

# ============================================================================
# Import/export
# ============================================================================

CSV_HEADER = ["Client Name", "Status", "Date", "Start Time", "End Time", "Duration", "Notes"]
MONTHLY_CSV_HEADER = ["Client Name", "Date", "Start Time", "End Time", "Duration", "Notes"]
CSV_HEADER_HINTS = ("name", "client", "rate")

IMPORT_PLACEHOLDER = """Paste your client data here...

CSV Format:
Client Name, Hourly Rate
Acme Corp, 75
Tech Startup, 100
Local Business, 50

Or JSON Format:
[{"name":"Client 1","hourlyRate":75}]"""

# ============================================================================
# UI
# ============================================================================

BORDER_RADIUS = 10
BORDER_RADIUS_LG = 20

SNACK_DURATION_MS = 3000

DIALOG_WIDTH_MD = 300
DIALOG_WIDTH_LG = 360
AUTH_FORM_WIDTH = 380
SIDEBAR_WIDTH = 288
IMPORT_FIELD_HEIGHT = 200

FONT_SIZE_SM = 10
FONT_SIZE_MD = 12
FONT_SIZE_LG = 14
FONT_SIZE_XL = 16
FONT_SIZE_2XL = 20
FONT_SIZE_3XL = 28
FONT_SIZE_TIMER = 40

ICON_SIZE_SM = 16
ICON_SIZE_MD = 18

SPACING_SM = 4
SPACING_MD = 8
SPACING_LG = 12

PADDING_LG = 12
PADDING_XL = 16
PADDING_2XL = 24

CLIENT_NAME_MAX_LENGTH = 100

COLORS = {
    "bg": "#1e1e1e",
    "sidebar": "#121212",
    "card": "#2d2d2d",
    "card_hover": "#383838",
    "accent": "#4a9eff",
    "input_bg": "#252525",
    "border": "#333",
    "danger": "#ff6b6b",
    "muted": "#888888",
    "white": "white",
    "green": "#4caf50",
    "blue": "#2196f3",
    "orange": "#ff9800",
    "purple": "#9c27b0",
    "selected": "#1f3a5c",
}
