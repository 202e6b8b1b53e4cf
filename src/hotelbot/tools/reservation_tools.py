from __future__ import annotations
from typing import Any, Dict, Optional
import logging
from datetime import date

from hotelbot.tools import tool, get_reservation_service
from hotelbot.models import Reservation, Session
from hotelbot.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    ReservationError,
    ValidationError,
)

logger = logging.getLogger(__name__)


# ------------------------------------
# Helpers (parsing, ownership, payloads)
# ------------------------------------

def parse_date(value: Optional[str], label: str) -> Optional[date]:
    """Parses YYYY-MM-DD; None stays None so the engine reports missing dates."""
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label} date format. Use YYYY-MM-DD.")


def extract_reservation_id(reservation_id: Any) -> int:
    """
    Extract integer ID from reservation_id parameter.
    Handles both integer IDs and RSV-XXXXXX format strings.
    """
    if isinstance(reservation_id, int):
        return reservation_id

    if isinstance(reservation_id, str):
        if reservation_id.upper().startswith("RSV-"):
            try:
                return int(reservation_id.split("-")[1])
            except (IndexError, ValueError):
                raise ValidationError(f"Invalid reservation ID format: {reservation_id}")
        try:
            return int(reservation_id)
        except ValueError:
            raise ValidationError(f"Invalid reservation ID: {reservation_id}")

    raise ValidationError(f"Reservation ID must be int or str, got {type(reservation_id).__name__}")


def _error(exc: Exception) -> Dict[str, Any]:
    return {"error": str(exc), "code": getattr(exc, "code", "error")}


def _payload(reservation: Reservation) -> Dict[str, Any]:
    data = reservation.to_dict()
    data["reference_code"] = reservation.get_reference_code()
    data["nights"] = reservation.nights()
    return data


def _resolve_customer(session: Session, customer_id: Optional[int]) -> int:
    if session.is_guest:
        if customer_id is not None and customer_id != session.user_id:
            raise PermissionDeniedError("Guests can only book for themselves")
        return session.user_id
    if customer_id is None:
        raise ValidationError("customer_id is required for staff bookings")
    return customer_id


def _load_for(session: Session, reservation_id: Any) -> Reservation:
    """Fetch a reservation the session may see. Other guests' bookings look missing."""
    res_id = extract_reservation_id(reservation_id)
    reservation = get_reservation_service().find_by_id(res_id)
    if reservation is None or (session.is_guest and reservation.customer_id != session.user_id):
        raise NotFoundError(f"Reservation {res_id} not found")
    return reservation


def _require_admin(session: Session, action: str) -> None:
    if not session.is_admin:
        raise PermissionDeniedError(f"Only staff can {action}")


# ------------------------------------
# TOOLS IMPLEMENTATION
# ------------------------------------

@tool
def check_availability(session: Session, check_in: str, check_out: str) -> Dict[str, Any]:
    """
    Lists rooms that can be booked for the given dates.

    Rooms under maintenance are left out, matching get_room_prices.

    Args:
        check_in: Check-in date (YYYY-MM-DD)
        check_out: Check-out date (YYYY-MM-DD)
    """
    try:
        rooms = get_reservation_service().get_available_rooms(
            parse_date(check_in, "check-in"), parse_date(check_out, "check-out")
        )
    except ReservationError as e:
        return _error(e)
    rooms = [room for room in rooms if not room.is_under_maintenance()]

    logger.debug(f"{session.describe()} checked availability {check_in} -> {check_out}: {len(rooms)} rooms")
    return {
        "check_in": check_in,
        "check_out": check_out,
        "available_rooms": [room.to_dict() for room in rooms],
    }


@tool
def create_reservation(
    session: Session,
    room_id: int,
    check_in: str,
    check_out: str,
    guests: int = 1,
    customer_id: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Books a room. Guests book for themselves; staff must name the customer.
    """
    try:
        reservation = get_reservation_service().create_reservation(
            customer_id=_resolve_customer(session, customer_id),
            room_id=room_id,
            check_in=parse_date(check_in, "check-in"),
            check_out=parse_date(check_out, "check-out"),
            guests=guests,
        )
    except (ReservationError, PermissionDeniedError) as e:
        return _error(e)

    return {
        "success": True,
        "message": f"Reservation {reservation.get_reference_code()} booked.",
        "reservation": _payload(reservation),
    }


@tool
def update_reservation(
    session: Session,
    reservation_id: Any,
    room_id: Optional[int] = None,
    check_in: Optional[str] = None,
    check_out: Optional[str] = None,
    guests: Optional[int] = None,
    customer_id: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Changes the room, dates or guest count of a reservation. Omitted fields keep their value.
    """
    try:
        existing = _load_for(session, reservation_id)
        if session.is_guest and customer_id is not None and customer_id != existing.customer_id:
            raise PermissionDeniedError("Guests cannot move a reservation to another customer")

        new_check_in = parse_date(check_in, "check-in") if check_in is not None else existing.check_in
        new_check_out = parse_date(check_out, "check-out") if check_out is not None else existing.check_out

        updated = get_reservation_service().update_reservation(
            reservation_id=existing.id,
            customer_id=customer_id if customer_id is not None else existing.customer_id,
            room_id=room_id if room_id is not None else existing.room_id,
            check_in=new_check_in,
            check_out=new_check_out,
            guests=guests if guests is not None else existing.guests,
        )
    except (ReservationError, PermissionDeniedError) as e:
        return _error(e)

    return {
        "success": True,
        "message": f"Reservation {updated.get_reference_code()} updated.",
        "reservation": _payload(updated),
    }


@tool
def get_reservation(session: Session, reservation_id: Any) -> Dict[str, Any]:
    """
    Returns reservation details by ID (123 or RSV-000123).
    """
    try:
        reservation = _load_for(session, reservation_id)
    except ReservationError as e:
        return _error(e)
    return {"reservation": _payload(reservation)}


@tool
def list_reservations(session: Session) -> Dict[str, Any]:
    """
    Lists reservations: a guest's own, or every reservation for staff.
    """
    service = get_reservation_service()
    if session.is_guest:
        reservations = service.find_by_customer_id(session.user_id)
    else:
        reservations = service.find_all()
    return {"reservations": [_payload(r) for r in reservations]}


@tool
def cancel_reservation(session: Session, reservation_id: Any) -> Dict[str, Any]:
    """
    Cancels a reservation by ID. Cancelling twice is harmless.
    """
    try:
        reservation = _load_for(session, reservation_id)
        cancelled = get_reservation_service().cancel_reservation(reservation.id)
    except ReservationError as e:
        return _error(e)

    return {
        "success": True,
        "message": f"Reservation {cancelled.get_reference_code()} cancelled.",
        "reservation": _payload(cancelled),
    }


@tool
def check_in_reservation(session: Session, reservation_id: Any) -> Dict[str, Any]:
    """
    Marks a booked reservation as checked in. Staff only.
    """
    try:
        _require_admin(session, "check guests in")
        reservation = _load_for(session, reservation_id)
        checked_in = get_reservation_service().check_in(reservation.id)
    except (ReservationError, PermissionDeniedError) as e:
        return _error(e)

    return {
        "success": True,
        "message": f"Reservation {checked_in.get_reference_code()} checked in.",
        "reservation": _payload(checked_in),
    }


@tool
def check_out_reservation(session: Session, reservation_id: Any) -> Dict[str, Any]:
    """
    Completes a checked-in reservation and frees the room. Staff only.
    """
    try:
        _require_admin(session, "check guests out")
        reservation = _load_for(session, reservation_id)
        completed = get_reservation_service().check_out(reservation.id)
    except (ReservationError, PermissionDeniedError) as e:
        return _error(e)

    return {
        "success": True,
        "message": f"Reservation {completed.get_reference_code()} checked out.",
        "reservation": _payload(completed),
    }
