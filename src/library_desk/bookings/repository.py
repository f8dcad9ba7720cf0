from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import ShiftId
from .model import SeatBooking


class BookingRepository(Protocol):
    def get_by_id(self, booking_id: int) -> Optional[SeatBooking]:
        raise NotImplementedError

    def find_active_for_user(self, *, user_id: int, shift: ShiftId, booking_date: date) -> Optional[SeatBooking]:
        """Pending or booked row held by the user for (shift, date)."""

        raise NotImplementedError

    def find_booked_seat(self, *, shift: ShiftId, seat_number: str, booking_date: date) -> Optional[SeatBooking]:
        raise NotImplementedError

    def create_pending(self, *, user_id: int, shift: ShiftId, seat_number: str, booking_date: date) -> int:
        """Raises DuplicateKeyError if the user already holds an active booking for (shift, date)."""

        raise NotImplementedError

    def mark_booked(self, booking_id: int) -> bool:
        """pending -> booked. False when no pending row matched.

        Raises DuplicateKeyError when another row already holds the seat as booked.
        """

        raise NotImplementedError

    def delete_pending(self, booking_id: int) -> bool:
        raise NotImplementedError

    def count_booked(self, *, shift: ShiftId, booking_date: date) -> int:
        raise NotImplementedError

    def list_for_user(self, user_id: int, *, booking_date: Optional[date] = None) -> Sequence[SeatBooking]:
        raise NotImplementedError

    def list_for_date(self, booking_date: date, *, shift: Optional[ShiftId] = None) -> Sequence[SeatBooking]:
        raise NotImplementedError
