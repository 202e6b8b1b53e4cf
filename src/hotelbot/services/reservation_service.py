from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Callable, Dict, FrozenSet, List, Optional

from hotelbot.adapters.base import ReservationStore, RoomStore
from hotelbot.models import Reservation, ReservationStatus, Room, RoomStatus
from hotelbot.services.occupancy import derive_room_status
from hotelbot.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ReservationError,
    ValidationError,
)

logger = logging.getLogger(__name__)


# Every status must have an entry; terminal states map to an empty set.
_TRANSITIONS: Dict[ReservationStatus, FrozenSet[ReservationStatus]] = {
    ReservationStatus.BOOKED: frozenset({ReservationStatus.CHECKED_IN, ReservationStatus.CANCELLED}),
    ReservationStatus.CHECKED_IN: frozenset({ReservationStatus.COMPLETED}),
    ReservationStatus.COMPLETED: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
}


def _check_dates(check_in: Optional[date], check_out: Optional[date]) -> None:
    if check_in is None or check_out is None:
        raise ValidationError("Dates required")
    if check_out <= check_in:
        raise ValidationError("Check-out must be after check-in")


def _guest_count(guests: Optional[int]) -> int:
    return guests if guests is not None and guests > 0 else 1


class ReservationService:
    """
    Reservation engine: validates bookings, prevents double booking, drives
    the reservation lifecycle and keeps room status in line with the active
    reservations of each room.

    Rejected operations raise a ReservationError subclass before anything is
    written. Storage failures surface as StorageError and are not retried.
    """

    def __init__(
        self,
        reservations: ReservationStore,
        rooms: RoomStore,
        today: Callable[[], date] = date.today,
    ):
        self.reservations = reservations
        self.rooms = rooms
        self._today = today
        # Serializes validate-then-write sequences for callers sharing this engine.
        self._lock = threading.RLock()

    @property
    def lock(self):
        """The engine lock. Share it with anything else that writes room status."""
        return self._lock

    # ------------------------------------
    # Validation
    # ------------------------------------
    def _check_reservation(
        self,
        exclude_id: Optional[int],
        customer_id: int,
        room_id: int,
        check_in: Optional[date],
        check_out: Optional[date],
    ) -> Room:
        _check_dates(check_in, check_out)
        if check_in < self._today():
            raise ValidationError("Check-in cannot be in the past")

        room = self.rooms.get_room(room_id)
        if room is None:
            raise NotFoundError(f"Room {room_id} not found")

        if self.reservations.find_overlapping(room_id, check_in, check_out, exclude_id):
            raise ConflictError("Room is already booked for these dates")
        return room

    def validate_reservation(
        self,
        exclude_id: Optional[int],
        customer_id: int,
        room_id: int,
        check_in: Optional[date],
        check_out: Optional[date],
    ) -> Optional[ReservationError]:
        """
        Run the booking checks without writing anything.

        Returns None when the booking is acceptable, otherwise the error for the
        first failed check (its `code` tells the kind apart).
        """
        try:
            self._check_reservation(exclude_id, customer_id, room_id, check_in, check_out)
        except ReservationError as e:
            return e
        return None

    def _get_reservation(self, reservation_id: int) -> Reservation:
        reservation = self.reservations.get_reservation(reservation_id)
        if reservation is None:
            raise NotFoundError(f"Reservation {reservation_id} not found")
        return reservation

    def _transition(self, reservation: Reservation, target: ReservationStatus) -> None:
        if target not in _TRANSITIONS[reservation.status]:
            raise InvalidTransitionError(
                f"Reservation {reservation.id} is {reservation.status.label()}, "
                f"cannot change to {target.label()}"
            )
        reservation.status = target

    # ------------------------------------
    # Lifecycle
    # ------------------------------------
    def create_reservation(
        self,
        customer_id: int,
        room_id: int,
        check_in: Optional[date],
        check_out: Optional[date],
        guests: Optional[int] = 1,
    ) -> Reservation:
        with self._lock:
            try:
                self._check_reservation(None, customer_id, room_id, check_in, check_out)
            except ReservationError as e:
                logger.warning(f"Reservation for room {room_id} rejected: {e}")
                raise

            reservation = self.reservations.create_reservation(
                Reservation(
                    customer_id=customer_id,
                    room_id=room_id,
                    check_in=check_in,
                    check_out=check_out,
                    guests=_guest_count(guests),
                )
            )
            self.sync_room_status(room_id)

        logger.info(
            f"Reservation {reservation.get_reference_code()} booked: room {room_id}, "
            f"{check_in} -> {check_out}, customer {customer_id}"
        )
        return reservation

    def update_reservation(
        self,
        reservation_id: int,
        customer_id: int,
        room_id: int,
        check_in: Optional[date],
        check_out: Optional[date],
        guests: Optional[int] = 1,
    ) -> Reservation:
        with self._lock:
            reservation = self._get_reservation(reservation_id)
            try:
                self._check_reservation(reservation_id, customer_id, room_id, check_in, check_out)
            except ReservationError as e:
                logger.warning(f"Update of reservation {reservation_id} rejected: {e}")
                raise

            old_room_id = reservation.room_id
            reservation.customer_id = customer_id
            reservation.room_id = room_id
            reservation.check_in = check_in
            reservation.check_out = check_out
            reservation.guests = _guest_count(guests)
            self.reservations.update_reservation(reservation)

            if old_room_id != room_id:
                self.sync_room_status(old_room_id)
            self.sync_room_status(room_id)

        logger.info(f"Reservation {reservation_id} updated: room {old_room_id} -> {room_id}")
        return reservation

    def cancel_reservation(self, reservation_id: int) -> Reservation:
        """Cancel a booking. Cancelling twice is a no-op that still succeeds."""
        with self._lock:
            reservation = self._get_reservation(reservation_id)
            if reservation.status == ReservationStatus.CANCELLED:
                logger.info(f"Reservation {reservation_id} already cancelled")
                return reservation

            self._transition(reservation, ReservationStatus.CANCELLED)
            self.reservations.update_reservation(reservation)
            self.sync_room_status(reservation.room_id)

        logger.info(f"Reservation {reservation_id} cancelled")
        return reservation

    def check_in(self, reservation_id: int) -> Reservation:
        with self._lock:
            reservation = self._get_reservation(reservation_id)
            self._transition(reservation, ReservationStatus.CHECKED_IN)
            self.reservations.update_reservation(reservation)

        logger.info(f"Reservation {reservation_id} checked in")
        return reservation

    def check_out(self, reservation_id: int) -> Reservation:
        with self._lock:
            reservation = self._get_reservation(reservation_id)
            self._transition(reservation, ReservationStatus.COMPLETED)
            self.reservations.update_reservation(reservation)
            self.sync_room_status(reservation.room_id)

        logger.info(f"Reservation {reservation_id} checked out")
        return reservation

    # ------------------------------------
    # Occupancy
    # ------------------------------------
    def sync_room_status(self, room_id: int) -> Optional[RoomStatus]:
        """
        Re-derive a room's status from its reservations and store it if it changed.

        Rooms under maintenance are left alone. Returns the room's resulting
        status, or None when the room does not exist.
        """
        with self._lock:
            room = self.rooms.get_room(room_id)
            if room is None:
                logger.warning(f"Status sync skipped: room {room_id} not found")
                return None
            if room.is_under_maintenance():
                return room.status

            status = derive_room_status(self.reservations.list_reservations_for_room(room_id))
            if room.status != status:
                self.rooms.update_room_status(room_id, status)
                logger.info(f"Room {room.room_number} is now {status.value}")
            return status

    def get_available_rooms(self, check_in: Optional[date], check_out: Optional[date]) -> List[Room]:
        """Rooms with no blocking reservation in [check_in, check_out)."""
        _check_dates(check_in, check_out)
        return [
            room
            for room in self.rooms.list_rooms()
            if not self.reservations.find_overlapping(room.id, check_in, check_out)
        ]

    # ------------------------------------
    # Reads
    # ------------------------------------
    def find_all(self) -> List[Reservation]:
        return self.reservations.list_reservations()

    def find_by_id(self, reservation_id: int) -> Optional[Reservation]:
        return self.reservations.get_reservation(reservation_id)

    def find_by_customer_id(self, customer_id: int) -> List[Reservation]:
        return self.reservations.list_reservations_for_customer(customer_id)
