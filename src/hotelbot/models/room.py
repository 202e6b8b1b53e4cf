from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any


class RoomType(str, Enum):
    SINGLE = "SINGLE"
    DOUBLE = "DOUBLE"
    SUITE = "SUITE"

    def label(self) -> str:
        return self.value.capitalize()


class RoomStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    MAINTENANCE = "MAINTENANCE"


@dataclass
class Room:
    """Hotel room. `status` is maintained by the reservation engine."""

    room_number: str
    room_type: RoomType
    price_per_night: float

    id: Optional[int] = field(default=None)
    status: RoomStatus = field(default=RoomStatus.AVAILABLE)

    def is_under_maintenance(self) -> bool:
        return self.status == RoomStatus.MAINTENANCE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "room_number": self.room_number,
            "room_type": self.room_type.value,
            "price_per_night": self.price_per_night,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Room:
        return cls(
            id=data.get("id"),
            room_number=data["room_number"],
            room_type=RoomType(data["room_type"]),
            price_per_night=float(data["price_per_night"]),
            status=RoomStatus(data.get("status") or RoomStatus.AVAILABLE.value),
        )
