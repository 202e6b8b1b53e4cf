from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Dict, Any, FrozenSet


class ReservationStatus(str, Enum):
    BOOKED = "BOOKED"
    CHECKED_IN = "CHECKED_IN"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    def label(self) -> str:
        return self.value.replace("_", " ").capitalize()


# Only these count toward room occupancy.
ACTIVE_STATUSES: FrozenSet[ReservationStatus] = frozenset(
    {ReservationStatus.BOOKED, ReservationStatus.CHECKED_IN}
)


def _as_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


@dataclass
class Reservation:
    """A stay of one customer in one room over the half-open range [check_in, check_out)."""

    customer_id: int
    room_id: int
    check_in: date
    check_out: date

    id: Optional[int] = field(default=None)
    guests: int = field(default=1)
    status: ReservationStatus = field(default=ReservationStatus.BOOKED)

    def get_reference_code(self) -> Optional[str]:
        """Human friendly code in 'RSV-000123' format."""
        if self.id is None:
            return None
        return f"RSV-{self.id:06d}"

    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "room_id": self.room_id,
            "check_in": self.check_in.isoformat(),
            "check_out": self.check_out.isoformat(),
            "guests": self.guests,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Reservation:
        guests = data.get("guests") or 1
        return cls(
            id=data.get("id"),
            customer_id=int(data["customer_id"]),
            room_id=int(data["room_id"]),
            check_in=_as_date(data["check_in"]),
            check_out=_as_date(data["check_out"]),
            guests=max(int(guests), 1),
            status=ReservationStatus(data.get("status") or ReservationStatus.BOOKED.value),
        )
