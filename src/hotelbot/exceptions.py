"""Custom exceptions for Hotel Bot."""
from __future__ import annotations


class HotelBotError(Exception):
    """Base exception for all Hotel Bot errors."""
    pass


class ConfigurationError(HotelBotError):
    """Raised when configuration is invalid or missing."""
    pass


class StorageError(HotelBotError):
    """Raised when the backing store cannot complete an operation."""
    pass


class DatabaseError(StorageError):
    """Raised when database operations fail."""
    pass


class ReservationError(HotelBotError):
    """Base for rejected reservation operations. State is left untouched."""

    code = "reservation_error"


class ValidationError(ReservationError):
    """Missing or invalid dates, check-out not after check-in, check-in in the past."""

    code = "validation"


class NotFoundError(ReservationError):
    """Unknown room or reservation id."""

    code = "not_found"


class ConflictError(ReservationError):
    """The room already has an overlapping reservation, or a unique key is taken."""

    code = "conflict"


class InvalidTransitionError(ReservationError):
    """Raised when a lifecycle operation is called from the wrong state."""

    code = "invalid_transition"


class PermissionDeniedError(HotelBotError):
    """Raised when the session is not allowed to perform an operation."""

    code = "permission_denied"
