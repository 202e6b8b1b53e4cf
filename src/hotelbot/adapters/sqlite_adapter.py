from __future__ import annotations

import sqlite3
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from hotelbot.exceptions import DatabaseError
from hotelbot.models import Reservation, ReservationStatus, Room, RoomStatus

logger = logging.getLogger(__name__)


class SQLiteHotelAdapter:
    """SQLite store for rooms and reservations. Implements RoomStore and ReservationStore."""

    def __init__(self, db_url: str):
        # Format: sqlite:///path
        if db_url.startswith("sqlite:///"):
            self.db_path = db_url.replace("sqlite:///", "")
        else:
            self.db_path = db_url

        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"SQLiteHotelAdapter initialised. Database path: {self.db_path}")

    def _conn(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            return conn
        except sqlite3.Error as e:
            logger.error(f"Database connection error: {e}")
            raise DatabaseError(f"Could not connect to database: {e}") from e

    # ------------------------------------
    # Lifecycle
    # ------------------------------------
    def init(self) -> None:
        """Creates the tables if they do not exist."""
        logger.info("Checking/creating database tables...")
        try:
            with self._conn() as conn:
                cur = conn.cursor()
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS rooms (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        room_number TEXT NOT NULL UNIQUE,
                        room_type TEXT NOT NULL,
                        price_per_night REAL NOT NULL,
                        status TEXT NOT NULL DEFAULT 'AVAILABLE',
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    )
                    """
                )
                # Dates are ISO text, so string comparison follows calendar order.
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS reservations (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        customer_id INTEGER NOT NULL,
                        room_id INTEGER NOT NULL,
                        check_in TEXT NOT NULL,
                        check_out TEXT NOT NULL,
                        guests INTEGER NOT NULL DEFAULT 1,
                        status TEXT NOT NULL DEFAULT 'BOOKED',
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                        FOREIGN KEY(room_id) REFERENCES rooms(id)
                    )
                    """
                )
                conn.commit()
                logger.info("Table initialisation completed.")
        except sqlite3.Error as e:
            logger.error(f"SQLite error during table initialisation: {e}")
            raise DatabaseError(f"Table initialisation failed: {e}") from e

    # ------------------------------------
    # Helpers
    # ------------------------------------
    def _fetch_one(self, query: str, params: tuple) -> Optional[Dict[str, Any]]:
        try:
            with self._conn() as conn:
                cur = conn.cursor()
                cur.execute(query, params)
                row = cur.fetchone()
                return dict(row) if row else None
        except sqlite3.Error as e:
            logger.error(f"Query failed ({query.split()[0]}): {e}")
            raise DatabaseError(f"Query failed: {e}") from e

    def _fetch_all(self, query: str, params: tuple = ()) -> List[Dict[str, Any]]:
        try:
            with self._conn() as conn:
                cur = conn.cursor()
                cur.execute(query, params)
                return [dict(r) for r in cur.fetchall()]
        except sqlite3.Error as e:
            logger.error(f"Query failed ({query.split()[0]}): {e}")
            raise DatabaseError(f"Query failed: {e}") from e

    def _execute(self, query: str, params: tuple) -> sqlite3.Cursor:
        try:
            with self._conn() as conn:
                cur = conn.cursor()
                cur.execute(query, params)
                conn.commit()
                return cur
        except sqlite3.IntegrityError as e:
            logger.warning(f"Integrity violation: {e}")
            raise DatabaseError(f"Integrity violation: {e}") from e
        except sqlite3.Error as e:
            logger.error(f"Write failed: {e}")
            raise DatabaseError(f"Write failed: {e}") from e

    # ------------------------------------
    # Room CRUD
    # ------------------------------------
    def create_room(self, room: Room) -> Room:
        logger.info(f"Creating room {room.room_number}")
        cur = self._execute(
            "INSERT INTO rooms (room_number, room_type, price_per_night, status) VALUES (?, ?, ?, ?)",
            (room.room_number, room.room_type.value, room.price_per_night, room.status.value),
        )
        room.id = cur.lastrowid
        return room

    def get_room(self, room_id: int) -> Optional[Room]:
        row = self._fetch_one("SELECT * FROM rooms WHERE id = ?", (room_id,))
        return Room.from_dict(row) if row else None

    def get_room_by_number(self, room_number: str) -> Optional[Room]:
        row = self._fetch_one("SELECT * FROM rooms WHERE room_number = ?", (room_number,))
        return Room.from_dict(row) if row else None

    def list_rooms(self) -> List[Room]:
        return [Room.from_dict(r) for r in self._fetch_all("SELECT * FROM rooms ORDER BY id")]

    def update_room(self, room: Room) -> Room:
        self._execute(
            "UPDATE rooms SET room_number = ?, room_type = ?, price_per_night = ?, status = ? WHERE id = ?",
            (room.room_number, room.room_type.value, room.price_per_night, room.status.value, room.id),
        )
        return room

    def update_room_details(self, room: Room) -> Room:
        """Writes number, type and price. The stored status is left as it is."""
        self._execute(
            "UPDATE rooms SET room_number = ?, room_type = ?, price_per_night = ? WHERE id = ?",
            (room.room_number, room.room_type.value, room.price_per_night, room.id),
        )
        return room

    def update_room_status(self, room_id: int, status: RoomStatus) -> None:
        self._execute("UPDATE rooms SET status = ? WHERE id = ?", (status.value, room_id))

    def delete_room(self, room_id: int) -> bool:
        cur = self._execute("DELETE FROM rooms WHERE id = ?", (room_id,))
        return cur.rowcount > 0

    # ------------------------------------
    # Reservation CRUD
    # ------------------------------------
    def create_reservation(self, reservation: Reservation) -> Reservation:
        cur = self._execute(
            """
            INSERT INTO reservations (customer_id, room_id, check_in, check_out, guests, status)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                reservation.customer_id,
                reservation.room_id,
                reservation.check_in.isoformat(),
                reservation.check_out.isoformat(),
                reservation.guests,
                reservation.status.value,
            ),
        )
        reservation.id = cur.lastrowid
        logger.info(f"Reservation stored. ID: {reservation.id}")
        return reservation

    def update_reservation(self, reservation: Reservation) -> Reservation:
        self._execute(
            """
            UPDATE reservations
            SET customer_id = ?, room_id = ?, check_in = ?, check_out = ?, guests = ?, status = ?
            WHERE id = ?
            """,
            (
                reservation.customer_id,
                reservation.room_id,
                reservation.check_in.isoformat(),
                reservation.check_out.isoformat(),
                reservation.guests,
                reservation.status.value,
                reservation.id,
            ),
        )
        return reservation

    def get_reservation(self, reservation_id: int) -> Optional[Reservation]:
        row = self._fetch_one("SELECT * FROM reservations WHERE id = ?", (reservation_id,))
        return Reservation.from_dict(row) if row else None

    def list_reservations(self) -> List[Reservation]:
        rows = self._fetch_all("SELECT * FROM reservations ORDER BY id")
        return [Reservation.from_dict(r) for r in rows]

    def list_reservations_for_room(self, room_id: int) -> List[Reservation]:
        rows = self._fetch_all("SELECT * FROM reservations WHERE room_id = ? ORDER BY id", (room_id,))
        return [Reservation.from_dict(r) for r in rows]

    def list_reservations_for_customer(self, customer_id: int) -> List[Reservation]:
        rows = self._fetch_all("SELECT * FROM reservations WHERE customer_id = ? ORDER BY id", (customer_id,))
        return [Reservation.from_dict(r) for r in rows]

    def find_overlapping(
        self,
        room_id: int,
        check_in: date,
        check_out: date,
        exclude_id: Optional[int] = None,
    ) -> List[Reservation]:
        # existing.check_in < new.check_out AND existing.check_out > new.check_in
        rows = self._fetch_all(
            """
            SELECT * FROM reservations
            WHERE room_id = ? AND status != ?
            AND check_in < ? AND check_out > ?
            ORDER BY id
            """,
            (room_id, ReservationStatus.CANCELLED.value, check_out.isoformat(), check_in.isoformat()),
        )
        return [
            Reservation.from_dict(r)
            for r in rows
            if exclude_id is None or r["id"] != exclude_id
        ]

    def delete_reservation(self, reservation_id: int) -> bool:
        """Administrative removal. Not a lifecycle transition."""
        cur = self._execute("DELETE FROM reservations WHERE id = ?", (reservation_id,))
        return cur.rowcount > 0
