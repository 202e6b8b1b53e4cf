"""Hotel Bot Core - reservation engine for hotel bookings"""

__version__ = "0.1.0"

# Core abstractions
from .base_config import HotelBotConfig

# Exceptions
from .exceptions import (
    HotelBotError,
    ConfigurationError,
    StorageError,
    DatabaseError,
    ReservationError,
    ValidationError,
    NotFoundError,
    ConflictError,
    InvalidTransitionError,
    PermissionDeniedError,
)

# Config management
from .config import get_config, set_config

# Models
from .models import Reservation, ReservationStatus, Room, RoomStatus, RoomType, Session

# Adapters
from .adapters.base import ReservationStore, RoomStore
from .adapters.sqlite_adapter import SQLiteHotelAdapter

# Services
from .services import ReservationService, RoomService

# Tool utilities
from .tools import get_adapter, set_adapter

__all__ = [
    # Version
    "__version__",

    # Core
    "HotelBotConfig",

    # Exceptions
    "HotelBotError",
    "ConfigurationError",
    "StorageError",
    "DatabaseError",
    "ReservationError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "InvalidTransitionError",
    "PermissionDeniedError",

    # Config
    "get_config",
    "set_config",

    # Models
    "Reservation",
    "ReservationStatus",
    "Room",
    "RoomStatus",
    "RoomType",
    "Session",

    # Adapters
    "ReservationStore",
    "RoomStore",
    "SQLiteHotelAdapter",

    # Services
    "ReservationService",
    "RoomService",

    # Tool utilities
    "get_adapter",
    "set_adapter",
]
