from .reservation_service import ReservationService
from .room_service import RoomService

__all__ = [
    "ReservationService",
    "RoomService",
]
