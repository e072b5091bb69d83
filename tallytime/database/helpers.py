import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from config import (
    FUTURE_TOLERANCE_SECONDS,
    MAX_HOURLY_RATE,
    MAX_ID_LENGTH,
    MAX_TEXT_LENGTH,
    MIN_USER_ID_LENGTH,
)
from models.entities import parse_timestamp

logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Base exception for data access operations."""
    pass


class BackendError(DatabaseError):
    """Raised by a table store when the backend rejects a request or is unreachable.

    The data layer propagates these unchanged so callers see the backend's message.
    """

    def __init__(self, message: str, status: Optional[int] = None, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code


class ValidationError(DatabaseError):
    """Raised before any remote call when input fails validation."""
    pass


def sanitize_text(value: Any) -> str:
    """Trim free text and cap it at MAX_TEXT_LENGTH characters."""
    if not isinstance(value, str):
        return ""
    return value.strip()[:MAX_TEXT_LENGTH]


def sanitize_notes(value: Any) -> Optional[str]:
    """Sanitize a note; empty notes are stored as None."""
    return sanitize_text(value) or None


def validate_hourly_rate(rate: Any) -> float:
    """Clamp a rate to [0, MAX_HOURLY_RATE] and round it to cents. Non-numbers become 0."""
    if isinstance(rate, bool) or not isinstance(rate, (int, float)):
        return 0.0
    if math.isnan(rate):
        return 0.0
    clamped = min(max(float(rate), 0.0), float(MAX_HOURLY_RATE))
    return round(clamped, 2)


def validate_id(value: Any, label: str = "ID") -> str:
    """Check an identifier is a non-empty string of plausible length.

    Raises:
        ValidationError: If the identifier is malformed.
    """
    if not isinstance(value, str) or not value.strip() or len(value) > MAX_ID_LENGTH:
        raise ValidationError(f"Invalid {label}")
    return value


def validate_user_id(value: Any) -> str:
    validate_id(value, "user ID")
    if len(value) < MIN_USER_ID_LENGTH:
        raise ValidationError("Invalid user ID")
    return value


def validate_timestamp(value: Any, label: str) -> datetime:
    """Parse a timestamp, raising ValidationError when it is not a valid date."""
    try:
        parsed = parse_timestamp(value)
    except (TypeError, ValueError):
        parsed = None
    if parsed is None:
        raise ValidationError(f"Invalid {label}")
    return parsed


def validate_start_time(value: Any, now: Optional[datetime] = None) -> datetime:
    """Parse a start timestamp and reject one more than a minute in the future."""
    start = validate_timestamp(value, "start time")
    now = now or datetime.now().astimezone()
    if start > now + timedelta(seconds=FUTURE_TOLERANCE_SECONDS):
        raise ValidationError("Start time cannot be in the future")
    return start


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
