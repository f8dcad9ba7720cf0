from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import BookingStatus, ShiftId
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import SeatBooking
from .repository import BookingRepository

_COLUMNS = "booking_id, user_id, shift, seat_number, booking_status, booking_date, created_at"


def _to_booking(r: dict) -> SeatBooking:
    return SeatBooking(
        booking_id=int(r["booking_id"]),
        user_id=int(r["user_id"]),
        shift=ShiftId(r["shift"]),
        seat_number=r["seat_number"],
        booking_status=BookingStatus(r["booking_status"]),
        booking_date=r["booking_date"],
        created_at=r.get("created_at"),
    )


class MySQLBookingRepository(BookingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, booking_id: int) -> Optional[SeatBooking]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM seat_bookings WHERE booking_id=%s", (int(booking_id),))
            r = fetchone(cur)
            return _to_booking(r) if r else None

    def find_active_for_user(self, *, user_id: int, shift: ShiftId, booking_date: date) -> Optional[SeatBooking]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM seat_bookings
                WHERE user_id=%s AND shift=%s AND booking_date=%s AND booking_status IN (%s, %s)
                LIMIT 1
                """,
                (int(user_id), shift.value, booking_date, BookingStatus.PENDING.value, BookingStatus.BOOKED.value),
            )
            r = fetchone(cur)
            return _to_booking(r) if r else None

    def find_booked_seat(self, *, shift: ShiftId, seat_number: str, booking_date: date) -> Optional[SeatBooking]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM seat_bookings
                WHERE shift=%s AND seat_number=%s AND booking_date=%s AND booking_status=%s
                LIMIT 1
                """,
                (shift.value, seat_number, booking_date, BookingStatus.BOOKED.value),
            )
            r = fetchone(cur)
            return _to_booking(r) if r else None

    def create_pending(self, *, user_id: int, shift: ShiftId, seat_number: str, booking_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO seat_bookings(user_id, shift, seat_number, booking_status, booking_date)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(user_id), shift.value, seat_number, BookingStatus.PENDING.value, booking_date),
            )
            return int(cur.lastrowid)

    def mark_booked(self, booking_id: int) -> bool:
        # uq_seat_booked is checked by InnoDB at this UPDATE; that is the authoritative seat check
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE seat_bookings
                SET booking_status=%s
                WHERE booking_id=%s AND booking_status=%s
                """,
                (BookingStatus.BOOKED.value, int(booking_id), BookingStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def delete_pending(self, booking_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM seat_bookings WHERE booking_id=%s AND booking_status=%s",
                (int(booking_id), BookingStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def count_booked(self, *, shift: ShiftId, booking_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS booked
                FROM seat_bookings
                WHERE shift=%s AND booking_date=%s AND booking_status=%s
                """,
                (shift.value, booking_date, BookingStatus.BOOKED.value),
            )
            r = fetchone(cur)
            return int(r["booked"]) if r else 0

    def list_for_user(self, user_id: int, *, booking_date: Optional[date] = None) -> Sequence[SeatBooking]:
        clauses = ["user_id=%s"]
        params: list[object] = [int(user_id)]
        if booking_date is not None:
            clauses.append("booking_date=%s")
            params.append(booking_date)
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM seat_bookings WHERE {where} ORDER BY booking_date DESC, shift",
                tuple(params),
            )
            return [_to_booking(r) for r in fetchall(cur)]

    def list_for_date(self, booking_date: date, *, shift: Optional[ShiftId] = None) -> Sequence[SeatBooking]:
        clauses = ["booking_date=%s"]
        params: list[object] = [booking_date]
        if shift is not None:
            clauses.append("shift=%s")
            params.append(shift.value)
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM seat_bookings WHERE {where} ORDER BY shift, seat_number",
                tuple(params),
            )
            return [_to_booking(r) for r in fetchall(cur)]
