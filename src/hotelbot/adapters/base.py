from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable, Optional, List

from hotelbot.models import Reservation, Room, RoomStatus


@runtime_checkable
class RoomStore(Protocol):
    def get_room(self, room_id: int) -> Optional[Room]: ...
    def get_room_by_number(self, room_number: str) -> Optional[Room]: ...
    def create_room(self, room: Room) -> Room: ...
    def update_room(self, room: Room) -> Room: ...
    def update_room_details(self, room: Room) -> Room: ...
    def update_room_status(self, room_id: int, status: RoomStatus) -> None: ...
    def list_rooms(self) -> List[Room]: ...
    def delete_room(self, room_id: int) -> bool: ...


@runtime_checkable
class ReservationStore(Protocol):
    def create_reservation(self, reservation: Reservation) -> Reservation: ...
    def update_reservation(self, reservation: Reservation) -> Reservation: ...
    def get_reservation(self, reservation_id: int) -> Optional[Reservation]: ...
    def list_reservations(self) -> List[Reservation]: ...
    def list_reservations_for_room(self, room_id: int) -> List[Reservation]: ...
    def list_reservations_for_customer(self, customer_id: int) -> List[Reservation]: ...

    def find_overlapping(
        self,
        room_id: int,
        check_in: date,
        check_out: date,
        exclude_id: Optional[int] = None,
    ) -> List[Reservation]:
        """Non-cancelled reservations of the room intersecting [check_in, check_out)."""
        ...

    def delete_reservation(self, reservation_id: int) -> bool: ...
