"""
Occupancy helpers shared by the reservation and room services.

A room's status is never counted up or down; it is re-derived from the
reservations that reference the room.
"""
from __future__ import annotations

from typing import Iterable

from hotelbot.models import Reservation, RoomStatus


def has_active_reservation(reservations: Iterable[Reservation]) -> bool:
    return any(r.is_active() for r in reservations)


def derive_room_status(reservations: Iterable[Reservation]) -> RoomStatus:
    """OCCUPIED if any of the room's reservations is BOOKED or CHECKED_IN, else AVAILABLE."""
    if has_active_reservation(reservations):
        return RoomStatus.OCCUPIED
    return RoomStatus.AVAILABLE
