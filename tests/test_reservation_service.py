"""
Tests for the reservation engine (hotelbot.services.reservation_service).

All bookings are made against a fixed "today" of 2024-05-01.
"""
import gc
import os
import tempfile
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta

import pytest

from hotelbot.adapters.sqlite_adapter import SQLiteHotelAdapter
from hotelbot.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from hotelbot.models import Reservation, ReservationStatus, Room, RoomStatus, RoomType
from hotelbot.services import ReservationService


TODAY = date(2024, 5, 1)
CUSTOMER = 7


# ============================================================================
# Test Fixtures and Helpers
# ============================================================================

def make_db_url(tmpdir: str) -> str:
    """Create a database URL for testing."""
    db_path = os.path.join(tmpdir, "hotelbot_test.db")
    return f"sqlite:///{db_path}"


def seed_sample_rooms(db: SQLiteHotelAdapter) -> dict:
    rooms = [
        ("101", RoomType.SINGLE, 80.0),
        ("102", RoomType.DOUBLE, 120.0),
        ("201", RoomType.SUITE, 200.0),
    ]
    created = {}
    for number, room_type, price in rooms:
        created[number] = db.create_room(Room(room_number=number, room_type=room_type, price_per_night=price))
    return created


def d(day: int, month: int = 6) -> date:
    return date(2024, month, day)


@pytest.fixture
def env():
    """Yields (db, engine, rooms) over a fresh temporary database."""
    td = tempfile.TemporaryDirectory()
    db = SQLiteHotelAdapter(make_db_url(td.name))
    db.init()
    rooms = seed_sample_rooms(db)
    engine = ReservationService(reservations=db, rooms=db, today=lambda: TODAY)
    try:
        yield db, engine, rooms
    finally:
        del engine, db
        gc.collect()
        time.sleep(0.05)
        td.cleanup()


def room_status(db: SQLiteHotelAdapter, room: Room) -> RoomStatus:
    return db.get_room(room.id).status


# ============================================================================
# Tests for create_reservation()
# ============================================================================

class TestCreateReservation:
    """Test suite for booking a room."""

    def test_create_books_room_and_marks_occupied(self, env):
        db, engine, rooms = env
        reservation = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 2)

        assert isinstance(reservation.id, int)
        assert reservation.status == ReservationStatus.BOOKED
        stored = db.get_reservation(reservation.id)
        assert stored.check_in == d(1)
        assert stored.check_out == d(5)
        assert stored.guests == 2
        assert room_status(db, rooms["101"]) == RoomStatus.OCCUPIED
        assert room_status(db, rooms["102"]) == RoomStatus.AVAILABLE

    def test_overlapping_booking_is_rejected(self, env):
        """Room 101 booked 06-01..06-05; 06-04..06-08 conflicts."""
        db, engine, rooms = env
        engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)

        with pytest.raises(ConflictError) as exc:
            engine.create_reservation(99, rooms["101"].id, d(4), d(8), 1)

        assert "already booked" in str(exc.value)
        assert len(db.list_reservations()) == 1

    def test_touching_ranges_do_not_conflict(self, env):
        """Check-out day equal to the next check-in day is not an overlap."""
        db, engine, rooms = env
        engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)

        second = engine.create_reservation(99, rooms["101"].id, d(5), d(8), 1)

        assert second.id is not None
        assert len(db.list_reservations_for_room(rooms["101"].id)) == 2

    def test_enclosing_range_conflicts(self, env):
        db, engine, rooms = env
        engine.create_reservation(CUSTOMER, rooms["101"].id, d(3), d(4), 1)

        with pytest.raises(ConflictError):
            engine.create_reservation(99, rooms["101"].id, d(1), d(10), 1)

    def test_same_dates_in_other_room_are_fine(self, env):
        db, engine, rooms = env
        engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)
        engine.create_reservation(CUSTOMER, rooms["102"].id, d(1), d(5), 1)

        assert len(db.list_reservations()) == 2

    def test_past_check_in_is_rejected(self, env):
        db, engine, rooms = env
        yesterday = TODAY - timedelta(days=1)

        with pytest.raises(ValidationError) as exc:
            engine.create_reservation(CUSTOMER, rooms["101"].id, yesterday, TODAY + timedelta(days=2), 1)

        assert "past" in str(exc.value)
        assert db.list_reservations() == []
        assert room_status(db, rooms["101"]) == RoomStatus.AVAILABLE

    def test_check_in_today_is_allowed(self, env):
        db, engine, rooms = env
        reservation = engine.create_reservation(CUSTOMER, rooms["101"].id, TODAY, TODAY + timedelta(days=1), 1)
        assert reservation.id is not None

    @pytest.mark.parametrize("check_out", [d(1), d(30, 5)])
    def test_check_out_must_follow_check_in(self, env, check_out):
        db, engine, rooms = env
        with pytest.raises(ValidationError):
            engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), check_out, 1)
        assert db.list_reservations() == []

    def test_missing_dates_are_rejected(self, env):
        db, engine, rooms = env
        with pytest.raises(ValidationError) as exc:
            engine.create_reservation(CUSTOMER, rooms["101"].id, None, d(5), 1)
        assert str(exc.value) == "Dates required"

    def test_unknown_room_is_rejected(self, env):
        db, engine, rooms = env
        with pytest.raises(NotFoundError):
            engine.create_reservation(CUSTOMER, 99999, d(1), d(5), 1)
        assert db.list_reservations() == []

    @pytest.mark.parametrize("guests", [0, -3, None])
    def test_guest_count_floor(self, env, guests):
        db, engine, rooms = env
        reservation = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), guests)
        assert db.get_reservation(reservation.id).guests == 1

    def test_cancelled_reservation_does_not_block(self, env):
        db, engine, rooms = env
        first = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)
        engine.cancel_reservation(first.id)

        second = engine.create_reservation(99, rooms["101"].id, d(2), d(4), 1)

        assert second.id != first.id
        assert room_status(db, rooms["101"]) == RoomStatus.OCCUPIED

    def test_completed_reservation_still_blocks(self, env):
        """COMPLETED rows keep taking part in the overlap check."""
        db, engine, rooms = env
        first = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)
        engine.check_in(first.id)
        engine.check_out(first.id)

        with pytest.raises(ConflictError):
            engine.create_reservation(99, rooms["101"].id, d(2), d(4), 1)


# ============================================================================
# Tests for validate_reservation()
# ============================================================================

class TestValidateReservation:
    """Test suite for the side-effect free booking checks."""

    def test_valid_booking_returns_none(self, env):
        db, engine, rooms = env
        assert engine.validate_reservation(None, CUSTOMER, rooms["101"].id, d(1), d(5)) is None
        assert db.list_reservations() == []

    def test_checks_short_circuit_in_order(self, env):
        db, engine, rooms = env
        # Bad range and unknown room: the date check runs first.
        error = engine.validate_reservation(None, CUSTOMER, 99999, d(5), d(1))
        assert isinstance(error, ValidationError)
        assert error.code == "validation"

        # Past check-in and unknown room: the past check runs first.
        error = engine.validate_reservation(None, CUSTOMER, 99999, d(20, month=4), d(25, month=4))
        assert isinstance(error, ValidationError)
        assert str(error) == "Check-in cannot be in the past"

        error = engine.validate_reservation(None, CUSTOMER, 99999, d(1), d(5))
        assert isinstance(error, NotFoundError)
        assert error.code == "not_found"

    def test_conflict_code_and_self_exclusion(self, env):
        db, engine, rooms = env
        existing = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)

        error = engine.validate_reservation(None, CUSTOMER, rooms["101"].id, d(3), d(6))
        assert isinstance(error, ConflictError)
        assert error.code == "conflict"

        assert engine.validate_reservation(existing.id, CUSTOMER, rooms["101"].id, d(3), d(6)) is None


# ============================================================================
# Tests for update_reservation()
# ============================================================================

class TestUpdateReservation:
    """Test suite for changing an existing reservation."""

    def test_update_own_dates_does_not_conflict_with_itself(self, env):
        db, engine, rooms = env
        reservation = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)

        updated = engine.update_reservation(reservation.id, CUSTOMER, rooms["101"].id, d(2), d(7), 3)

        stored = db.get_reservation(reservation.id)
        assert stored.check_in == d(2)
        assert stored.check_out == d(7)
        assert stored.guests == 3
        assert updated.status == ReservationStatus.BOOKED

    def test_update_into_other_booking_is_rejected_without_changes(self, env):
        db, engine, rooms = env
        engine.create_reservation(CUSTOMER, rooms["101"].id, d(10), d(15), 1)
        other = engine.create_reservation(99, rooms["101"].id, d(1), d(5), 2)

        with pytest.raises(ConflictError):
            engine.update_reservation(other.id, 99, rooms["101"].id, d(3), d(12), 2)

        stored = db.get_reservation(other.id)
        assert (stored.check_in, stored.check_out, stored.guests) == (d(1), d(5), 2)

    def test_move_to_other_room_resyncs_both_rooms(self, env):
        db, engine, rooms = env
        reservation = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)

        engine.update_reservation(reservation.id, CUSTOMER, rooms["102"].id, d(1), d(5), 1)

        assert db.get_reservation(reservation.id).room_id == rooms["102"].id
        assert room_status(db, rooms["101"]) == RoomStatus.AVAILABLE
        assert room_status(db, rooms["102"]) == RoomStatus.OCCUPIED

    def test_move_keeps_old_room_occupied_with_other_bookings(self, env):
        db, engine, rooms = env
        engine.create_reservation(99, rooms["101"].id, d(10), d(12), 1)
        moving = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)

        engine.update_reservation(moving.id, CUSTOMER, rooms["201"].id, d(1), d(5), 1)

        assert room_status(db, rooms["101"]) == RoomStatus.OCCUPIED
        assert room_status(db, rooms["201"]) == RoomStatus.OCCUPIED

    def test_update_guest_floor(self, env):
        db, engine, rooms = env
        reservation = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 2)
        engine.update_reservation(reservation.id, CUSTOMER, rooms["101"].id, d(1), d(5), 0)
        assert db.get_reservation(reservation.id).guests == 1

    def test_update_unknown_reservation(self, env):
        db, engine, rooms = env
        with pytest.raises(NotFoundError):
            engine.update_reservation(99999, CUSTOMER, rooms["101"].id, d(1), d(5), 1)

    def test_update_cancelled_reservation_keeps_room_free(self, env):
        db, engine, rooms = env
        reservation = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)
        engine.cancel_reservation(reservation.id)

        engine.update_reservation(reservation.id, CUSTOMER, rooms["102"].id, d(1), d(5), 1)

        assert db.get_reservation(reservation.id).status == ReservationStatus.CANCELLED
        assert room_status(db, rooms["102"]) == RoomStatus.AVAILABLE


# ============================================================================
# Tests for the lifecycle (check_in, check_out, cancel_reservation)
# ============================================================================

class TestLifecycle:
    """Test suite for reservation state transitions."""

    def test_check_in_once(self, env):
        db, engine, rooms = env
        reservation = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)

        checked_in = engine.check_in(reservation.id)
        assert checked_in.status == ReservationStatus.CHECKED_IN
        assert db.get_reservation(reservation.id).status == ReservationStatus.CHECKED_IN

        with pytest.raises(InvalidTransitionError):
            engine.check_in(reservation.id)
        assert db.get_reservation(reservation.id).status == ReservationStatus.CHECKED_IN

    def test_check_out_requires_check_in(self, env):
        db, engine, rooms = env
        reservation = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)

        with pytest.raises(InvalidTransitionError):
            engine.check_out(reservation.id)

        assert db.get_reservation(reservation.id).status == ReservationStatus.BOOKED
        assert room_status(db, rooms["101"]) == RoomStatus.OCCUPIED

    def test_check_out_completes_and_frees_room(self, env):
        db, engine, rooms = env
        reservation = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)
        engine.check_in(reservation.id)

        completed = engine.check_out(reservation.id)

        assert completed.status == ReservationStatus.COMPLETED
        assert room_status(db, rooms["101"]) == RoomStatus.AVAILABLE

    def test_check_out_keeps_room_occupied_with_later_booking(self, env):
        db, engine, rooms = env
        current = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)
        engine.create_reservation(99, rooms["101"].id, d(5), d(9), 1)
        engine.check_in(current.id)

        engine.check_out(current.id)

        assert room_status(db, rooms["101"]) == RoomStatus.OCCUPIED

    def test_cancel_frees_room(self, env):
        db, engine, rooms = env
        reservation = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)
        assert room_status(db, rooms["101"]) == RoomStatus.OCCUPIED

        engine.cancel_reservation(reservation.id)

        assert db.get_reservation(reservation.id).status == ReservationStatus.CANCELLED
        assert room_status(db, rooms["101"]) == RoomStatus.AVAILABLE

    def test_cancel_is_idempotent(self, env):
        db, engine, rooms = env
        reservation = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 2)
        engine.cancel_reservation(reservation.id)
        before = db.get_reservation(reservation.id)

        again = engine.cancel_reservation(reservation.id)

        assert again.status == ReservationStatus.CANCELLED
        assert db.get_reservation(reservation.id) == before

    def test_cancel_unknown_reservation(self, env):
        db, engine, rooms = env
        with pytest.raises(NotFoundError):
            engine.cancel_reservation(99999)

    def test_terminal_and_checked_in_reservations_cannot_be_cancelled(self, env):
        db, engine, rooms = env
        reservation = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)
        engine.check_in(reservation.id)

        with pytest.raises(InvalidTransitionError):
            engine.cancel_reservation(reservation.id)

        engine.check_out(reservation.id)
        with pytest.raises(InvalidTransitionError):
            engine.cancel_reservation(reservation.id)
        assert db.get_reservation(reservation.id).status == ReservationStatus.COMPLETED

    def test_cancelled_reservation_cannot_check_in(self, env):
        db, engine, rooms = env
        reservation = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)
        engine.cancel_reservation(reservation.id)

        with pytest.raises(InvalidTransitionError):
            engine.check_in(reservation.id)

    def test_lifecycle_on_unknown_reservation(self, env):
        db, engine, rooms = env
        with pytest.raises(NotFoundError):
            engine.check_in(99999)
        with pytest.raises(NotFoundError):
            engine.check_out(99999)


# ============================================================================
# Tests for occupancy sync and invariants
# ============================================================================

def assert_status_matches_reservations(db: SQLiteHotelAdapter) -> None:
    for room in db.list_rooms():
        if room.status == RoomStatus.MAINTENANCE:
            continue
        active = [r for r in db.list_reservations_for_room(room.id) if r.is_active()]
        expected = RoomStatus.OCCUPIED if active else RoomStatus.AVAILABLE
        assert room.status == expected, f"room {room.room_number}"


def assert_no_double_booking(db: SQLiteHotelAdapter) -> None:
    for room in db.list_rooms():
        active = [r for r in db.list_reservations_for_room(room.id) if r.is_active()]
        for i, a in enumerate(active):
            for b in active[i + 1:]:
                assert not (a.check_in < b.check_out and b.check_in < a.check_out), (a, b)


class TestOccupancy:
    """Test suite for room status derivation."""

    def test_status_follows_reservations_through_a_sequence(self, env):
        db, engine, rooms = env
        r1 = engine.create_reservation(1, rooms["101"].id, d(1), d(5), 1)
        r2 = engine.create_reservation(2, rooms["101"].id, d(5), d(9), 1)
        r3 = engine.create_reservation(3, rooms["102"].id, d(1), d(3), 1)
        assert_status_matches_reservations(db)

        engine.check_in(r1.id)
        engine.check_out(r1.id)
        assert_status_matches_reservations(db)

        engine.update_reservation(r3.id, 3, rooms["201"].id, d(1), d(3), 1)
        assert_status_matches_reservations(db)

        engine.cancel_reservation(r2.id)
        engine.cancel_reservation(r3.id)
        assert_status_matches_reservations(db)
        assert all(room.status == RoomStatus.AVAILABLE for room in db.list_rooms())

    def test_no_double_booking_after_mixed_attempts(self, env):
        db, engine, rooms = env
        attempts = [(1, 5), (4, 8), (5, 8), (2, 3), (8, 12), (11, 14), (12, 20)]
        for check_in, check_out in attempts:
            for room in rooms.values():
                try:
                    engine.create_reservation(CUSTOMER, room.id, d(check_in), d(check_out), 1)
                except ConflictError:
                    pass

        assert_no_double_booking(db)
        assert len(db.list_reservations_for_room(rooms["101"].id)) == 4

    def test_maintenance_is_never_overwritten(self, env):
        db, engine, rooms = env
        room = db.get_room(rooms["201"].id)
        room.status = RoomStatus.MAINTENANCE
        db.update_room(room)

        reservation = engine.create_reservation(CUSTOMER, room.id, d(1), d(5), 1)
        assert room_status(db, room) == RoomStatus.MAINTENANCE

        engine.cancel_reservation(reservation.id)
        assert room_status(db, room) == RoomStatus.MAINTENANCE

    def test_sync_repairs_drifted_status(self, env):
        db, engine, rooms = env
        room = db.get_room(rooms["102"].id)
        room.status = RoomStatus.OCCUPIED
        db.update_room(room)

        assert engine.sync_room_status(room.id) == RoomStatus.AVAILABLE
        assert room_status(db, room) == RoomStatus.AVAILABLE

    def test_sync_unknown_room(self, env):
        db, engine, rooms = env
        assert engine.sync_room_status(99999) is None

    def test_concurrent_identical_bookings_yield_one_reservation(self, env):
        db, engine, rooms = env

        def attempt(customer_id: int) -> bool:
            try:
                engine.create_reservation(customer_id, rooms["101"].id, d(1), d(5), 1)
                return True
            except ConflictError:
                return False

        with ThreadPoolExecutor(max_workers=6) as pool:
            results = list(pool.map(attempt, range(6)))

        assert results.count(True) == 1
        assert len(db.list_reservations_for_room(rooms["101"].id)) == 1


# ============================================================================
# Tests for get_available_rooms() and reads
# ============================================================================

class TestAvailability:
    """Test suite for the availability query."""

    def test_excludes_conflicting_rooms(self, env):
        db, engine, rooms = env
        engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)

        available = {room.room_number for room in engine.get_available_rooms(d(3), d(6))}
        assert available == {"102", "201"}

        available = {room.room_number for room in engine.get_available_rooms(d(5), d(6))}
        assert available == {"101", "102", "201"}

    def test_agrees_with_validation(self, env):
        db, engine, rooms = env
        engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)
        engine.create_reservation(CUSTOMER, rooms["201"].id, d(4), d(6), 1)

        available_ids = {room.id for room in engine.get_available_rooms(d(2), d(5))}
        for room in rooms.values():
            error = engine.validate_reservation(None, CUSTOMER, room.id, d(2), d(5))
            assert (error is None) == (room.id in available_ids)

    def test_invalid_range_is_rejected(self, env):
        db, engine, rooms = env
        with pytest.raises(ValidationError):
            engine.get_available_rooms(d(5), d(5))
        with pytest.raises(ValidationError):
            engine.get_available_rooms(None, d(5))


class TestReads:
    """Test suite for the read passthroughs."""

    def test_find_methods(self, env):
        db, engine, rooms = env
        mine = engine.create_reservation(CUSTOMER, rooms["101"].id, d(1), d(5), 1)
        engine.create_reservation(99, rooms["102"].id, d(1), d(5), 1)

        assert len(engine.find_all()) == 2
        assert engine.find_by_id(mine.id) == db.get_reservation(mine.id)
        assert engine.find_by_id(99999) is None
        assert [r.id for r in engine.find_by_customer_id(CUSTOMER)] == [mine.id]
        assert engine.find_by_customer_id(12345) == []
