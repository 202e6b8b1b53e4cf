from __future__ import annotations

import logging
import threading
from typing import ContextManager, List, Optional

from hotelbot.adapters.base import ReservationStore, RoomStore
from hotelbot.models import Room, RoomStatus, RoomType
from hotelbot.services.occupancy import derive_room_status, has_active_reservation
from hotelbot.exceptions import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class RoomService:
    """
    Room administration: registry maintenance and the out-of-band maintenance state.

    Pass the reservation engine's lock as `lock` so room writes and occupancy
    syncs never interleave. Without one the service uses a private lock.
    """

    def __init__(
        self,
        rooms: RoomStore,
        reservations: ReservationStore,
        lock: Optional[ContextManager] = None,
    ):
        self.rooms = rooms
        self.reservations = reservations
        self._lock = lock if lock is not None else threading.RLock()

    def _get_room(self, room_id: int) -> Room:
        room = self.rooms.get_room(room_id)
        if room is None:
            raise NotFoundError(f"Room {room_id} not found")
        return room

    def _check_number_free(self, room_number: str, room_id: Optional[int] = None) -> None:
        existing = self.rooms.get_room_by_number(room_number)
        if existing is not None and existing.id != room_id:
            raise ConflictError(f"Room number {room_number} is already in use")

    def add_room(self, room_number: str, room_type: RoomType, price_per_night: float) -> Room:
        if not room_number or not room_number.strip():
            raise ValidationError("Room number required")
        if price_per_night < 0:
            raise ValidationError("Price per night cannot be negative")

        number = room_number.strip()
        with self._lock:
            self._check_number_free(number)
            room = self.rooms.create_room(Room(room_number=number, room_type=room_type, price_per_night=price_per_night))
        logger.info(f"Room {number} added ({room_type.label()}, {price_per_night}/night)")
        return room

    def update_room(
        self,
        room_id: int,
        room_number: Optional[str] = None,
        room_type: Optional[RoomType] = None,
        price_per_night: Optional[float] = None,
    ) -> Room:
        """Partial update of number, type and price. The stored status is never written here."""
        if price_per_night is not None and price_per_night < 0:
            raise ValidationError("Price per night cannot be negative")

        with self._lock:
            room = self._get_room(room_id)
            if room_number is not None and room_number.strip():
                number = room_number.strip()
                self._check_number_free(number, room_id)
                room.room_number = number
            if room_type is not None:
                room.room_type = room_type
            if price_per_night is not None:
                room.price_per_night = price_per_night
            self.rooms.update_room_details(room)
            return self._get_room(room_id)

    def delete_room(self, room_id: int) -> bool:
        with self._lock:
            self._get_room(room_id)
            if has_active_reservation(self.reservations.list_reservations_for_room(room_id)):
                raise ConflictError(f"Room {room_id} has active reservations")
            deleted = self.rooms.delete_room(room_id)
        if deleted:
            logger.info(f"Room {room_id} deleted")
        return deleted

    def set_maintenance(self, room_id: int) -> Room:
        with self._lock:
            room = self._get_room(room_id)
            self.rooms.update_room_status(room_id, RoomStatus.MAINTENANCE)
            room.status = RoomStatus.MAINTENANCE
        logger.info(f"Room {room.room_number} put under maintenance")
        return room

    def end_maintenance(self, room_id: int) -> Room:
        with self._lock:
            room = self._get_room(room_id)
            if not room.is_under_maintenance():
                return room
            room.status = derive_room_status(self.reservations.list_reservations_for_room(room_id))
            self.rooms.update_room_status(room_id, room.status)
        logger.info(f"Room {room.room_number} back in service as {room.status.value}")
        return room

    def find_all(self) -> List[Room]:
        return self.rooms.list_rooms()

    def find_by_id(self, room_id: int) -> Optional[Room]:
        return self.rooms.get_room(room_id)

    def find_by_number(self, room_number: str) -> Optional[Room]:
        return self.rooms.get_room_by_number(room_number)
