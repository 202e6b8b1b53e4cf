from .room import Room, RoomStatus, RoomType
from .reservation import ACTIVE_STATUSES, Reservation, ReservationStatus
from .session import Session, UserType

__all__ = [
    "Room",
    "RoomStatus",
    "RoomType",
    "Reservation",
    "ReservationStatus",
    "ACTIVE_STATUSES",
    "Session",
    "UserType",
]
