"""
Error taxonomy for the reservation core.

Services raise these; the API layer renders them with the carried status
code. Not-found deliberately covers "expired" and "not yours" as well.
"""
from typing import Any, Dict, Optional


class ReservationError(Exception):
    """Base class for errors surfaced to callers."""

    status_code = 500

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.message = message
        self.extra = extra or {}
        super().__init__(message)


class ValidationError(ReservationError):
    """Missing or malformed input. Never retried."""

    status_code = 400


class NotFoundError(ReservationError):
    """Resource, appointment type, hold or booking absent (or expired / not owned)."""

    status_code = 404


class ConflictError(ReservationError):
    """Capacity exhausted, duplicate active hold, invalid state transition."""

    status_code = 409
