from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import BookingStatus, ShiftId


@dataclass(frozen=True)
class SeatBooking:
    """Domain entity: a seat reservation for one shift on one date."""

    booking_id: int
    user_id: int
    shift: ShiftId
    seat_number: str
    booking_status: BookingStatus
    booking_date: date
    created_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.booking_status in (BookingStatus.PENDING, BookingStatus.BOOKED)


@dataclass(frozen=True)
class BookingReceipt:
    """Result of a seat request: the pending booking and the payment gating it."""

    booking_id: int
    payment_id: int
    status: BookingStatus


@dataclass(frozen=True)
class ShiftAvailability:
    shift: ShiftId
    name: str
    total: int
    booked: int
    available: int
    price: int
