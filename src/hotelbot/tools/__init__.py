from __future__ import annotations
import threading
from typing import Any, Callable, Dict, List, Optional

from langchain_core.tools import StructuredTool

from hotelbot.adapters.sqlite_adapter import SQLiteHotelAdapter
from hotelbot.config import get_config
from hotelbot.models import Session
from hotelbot.services import ReservationService, RoomService

# Global store and engine instances
_adapter: Optional[SQLiteHotelAdapter] = None
_reservation_service: Optional[ReservationService] = None
_service_lock = threading.RLock()


# ------------------------------------
# Interface utilities
# ------------------------------------
def tool(func: Callable) -> Callable:
    """Marks a function as a caller-facing tool."""
    func._is_tool = True
    func._tool_name = func.__name__
    func._tool_description = (func.__doc__ or "").strip().split("\n")[0]
    return func


def get_adapter() -> SQLiteHotelAdapter:
    """
    Returns the global store, creating it from config when needed.
    """
    global _adapter
    if _adapter is None:
        with _service_lock:
            if _adapter is None:
                _adapter = get_config().create_adapter()
    return _adapter


def set_adapter(adapter: Optional[SQLiteHotelAdapter]) -> None:
    """Installs a custom store (useful for tests). Drops the cached engine."""
    global _adapter, _reservation_service
    _adapter = adapter
    _reservation_service = None


def get_reservation_service() -> ReservationService:
    """
    Returns the shared reservation engine. One instance per process so its
    lock covers every caller.
    """
    global _reservation_service
    if _reservation_service is None:
        with _service_lock:
            if _reservation_service is None:
                adapter = get_adapter()
                _reservation_service = ReservationService(reservations=adapter, rooms=adapter)
    return _reservation_service


def set_reservation_service(service: Optional[ReservationService]) -> None:
    global _reservation_service
    _reservation_service = service


def get_room_service() -> RoomService:
    """Room administration sharing the engine lock."""
    service = get_reservation_service()
    return RoomService(rooms=service.rooms, reservations=service.reservations, lock=service.lock)


# ------------------------------------
# Tool functions
# ------------------------------------
from .reservation_tools import (
    check_availability,
    create_reservation,
    update_reservation,
    get_reservation,
    list_reservations,
    cancel_reservation,
    check_in_reservation,
    check_out_reservation,
)
from .room_tools import (
    get_room_prices,
    set_room_maintenance,
)
from .schemas import (
    AvailabilityInput,
    CreateReservationInput,
    UpdateReservationInput,
    ReservationIdInput,
    NoInput,
    RoomMaintenanceInput,
)

_TOOL_SCHEMAS = [
    (get_room_prices, NoInput),
    (check_availability, AvailabilityInput),
    (create_reservation, CreateReservationInput),
    (update_reservation, UpdateReservationInput),
    (get_reservation, ReservationIdInput),
    (list_reservations, NoInput),
    (cancel_reservation, ReservationIdInput),
    (check_in_reservation, ReservationIdInput),
    (check_out_reservation, ReservationIdInput),
    (set_room_maintenance, RoomMaintenanceInput),
]


def _bind(func: Callable, session: Session) -> Callable[..., Dict[str, Any]]:
    def bound(**kwargs: Any) -> Dict[str, Any]:
        return func(session, **kwargs)
    bound.__name__ = func.__name__
    return bound


def get_tools(session: Session) -> List[StructuredTool]:
    """
    Builds LangChain `StructuredTool`s bound to one session.

    The session never appears in the tool arguments, so a model cannot act
    on behalf of another user.
    """
    return [
        StructuredTool.from_function(
            func=_bind(func, session),
            name=func._tool_name,
            description=func._tool_description,
            args_schema=schema,
        )
        for func, schema in _TOOL_SCHEMAS
    ]


def get_tool_map(session: Session) -> Dict[str, StructuredTool]:
    """Tool name -> `StructuredTool` for one session."""
    return {t.name: t for t in get_tools(session)}


__all__ = [
    # Utilities
    "tool",
    "get_adapter",
    "set_adapter",
    "get_reservation_service",
    "set_reservation_service",
    "get_room_service",

    # Tools
    "get_room_prices",
    "set_room_maintenance",
    "check_availability",
    "create_reservation",
    "update_reservation",
    "get_reservation",
    "list_reservations",
    "cancel_reservation",
    "check_in_reservation",
    "check_out_reservation",

    # LangChain helpers
    "get_tools",
    "get_tool_map",
]
