from .base import ReservationStore, RoomStore
from .sqlite_adapter import SQLiteHotelAdapter

__all__ = [
    "ReservationStore",
    "RoomStore",
    "SQLiteHotelAdapter",
]
