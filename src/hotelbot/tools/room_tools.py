from __future__ import annotations
from typing import Any, Dict
import logging

from hotelbot.tools import tool, get_room_service
from hotelbot.models import Session
from hotelbot.exceptions import PermissionDeniedError, ReservationError

logger = logging.getLogger(__name__)


@tool
def get_room_prices(session: Session) -> Dict[str, Any]:
    """
    Lists rooms in service with their type and nightly price.
    """
    rooms = [r for r in get_room_service().find_all() if not r.is_under_maintenance()]
    return {
        "rooms": [
            {
                "id": room.id,
                "room_number": room.room_number,
                "room_type": room.room_type.label(),
                "price_per_night": room.price_per_night,
            }
            for room in rooms
        ]
    }


@tool
def set_room_maintenance(session: Session, room_id: int, under_maintenance: bool) -> Dict[str, Any]:
    """
    Takes a room out of service or returns it. Staff only.
    """
    try:
        if not session.is_admin:
            raise PermissionDeniedError("Only staff can change room maintenance")
        service = get_room_service()
        room = service.set_maintenance(room_id) if under_maintenance else service.end_maintenance(room_id)
    except (ReservationError, PermissionDeniedError) as e:
        return {"error": str(e), "code": e.code}

    logger.info(f"{session.describe()} set room {room.room_number} to {room.status.value}")
    return {"success": True, "room": room.to_dict()}
