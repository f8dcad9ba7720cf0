from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..admissions.service import AdmissionService
from ..app_logger import get_logger
from ..common.datetime_utils import now_local
from ..common.validators import require_seat_number
from ..core.constants import BOOKING_FEE, TOTAL_SEATS
from ..core.enums import BookingStatus, CashPaymentStatus, Role, ShiftId
from ..core.exceptions import (
    AlreadyBooked,
    AuthorizationError,
    ConflictError,
    DuplicateKeyError,
    NotFoundError,
    SeatTaken,
)
from ..payments.repository import CashPaymentRepository
from ..shifts.catalog import ShiftCatalog, parse_shift
from .model import BookingReceipt, SeatBooking, ShiftAvailability
from .repository import BookingRepository

logger = get_logger("bookings")


def _require_admin(current_role: Role) -> None:
    if current_role != Role.ADMIN:
        raise AuthorizationError("Admin access required")


class BookingService:
    """Booking Ledger: seat requests, admin decisions and capacity queries.

    Checks made before a write are advisory. The store's unique keys decide:
    one active booking per (user, shift, date) at insert time, one booked row
    per (shift, seat, date) at approval time.
    """

    def __init__(
        self,
        bookings: BookingRepository,
        payments: CashPaymentRepository,
        admissions: Optional[AdmissionService] = None,
        catalog: Optional[ShiftCatalog] = None,
        *,
        total_seats: int = TOTAL_SEATS,
    ):
        self._bookings = bookings
        self._payments = payments
        self._admissions = admissions
        self._catalog = catalog or ShiftCatalog()
        self._total_seats = int(total_seats)

    def request_booking(self, *, user_id: int, shift, seat_number: str, booking_date: date) -> BookingReceipt:
        shift = parse_shift(shift)
        seat_number = require_seat_number(seat_number)
        user_id = int(user_id)

        if self._admissions is not None:
            self._admissions.require_enrolled(user_id, shift)

        if self._bookings.find_active_for_user(user_id=user_id, shift=shift, booking_date=booking_date):
            raise AlreadyBooked(f"You already have a booking for the {shift.value} shift on {booking_date.isoformat()}")
        if self._bookings.find_booked_seat(shift=shift, seat_number=seat_number, booking_date=booking_date):
            raise SeatTaken(f"Seat {seat_number} is already booked for this shift")

        try:
            booking_id = self._bookings.create_pending(
                user_id=user_id,
                shift=shift,
                seat_number=seat_number,
                booking_date=booking_date,
            )
        except DuplicateKeyError:
            raise AlreadyBooked(f"You already have a booking for the {shift.value} shift on {booking_date.isoformat()}")

        try:
            payment_id = self._payments.create(user_id=user_id, amount=Decimal(BOOKING_FEE), booking_id=booking_id)
        except Exception:
            # a booking without its payment could never be approved
            self._bookings.delete_pending(booking_id)
            raise

        logger.info(
            "Booking %s requested: user=%s shift=%s seat=%s date=%s (payment %s)",
            booking_id,
            user_id,
            shift.value,
            seat_number,
            booking_date.isoformat(),
            payment_id,
        )
        return BookingReceipt(booking_id=booking_id, payment_id=payment_id, status=BookingStatus.PENDING)

    def approve_booking(
        self,
        booking_id: int,
        *,
        current_role: Role,
        admin_user_id: int,
        now: Optional[datetime] = None,
    ) -> SeatBooking:
        """pending -> booked, settling the booking fee with it.

        The seat key is enforced by this write, not by any earlier read. The
        linked pending cash payment is approved in the same step so the seat
        and its fee never disagree.
        """

        _require_admin(current_role)
        booking = self._get(booking_id)

        try:
            changed = self._bookings.mark_booked(booking.booking_id)
        except DuplicateKeyError:
            logger.info("Booking %s lost seat %s (%s, %s)", booking_id, booking.seat_number, booking.shift.value, booking.booking_date)
            raise SeatTaken(f"Seat {booking.seat_number} was already confirmed for another student")

        if not changed:
            current = self._bookings.get_by_id(booking.booking_id)
            if not current:
                raise NotFoundError("Booking not found")
            raise ConflictError("Booking is already confirmed")

        payment = self._payments.find_pending_for_booking(booking.booking_id)
        if payment and not self._payments.decide(
            payment_id=payment.payment_id,
            status=CashPaymentStatus.APPROVED,
            decided_by=int(admin_user_id),
            decided_at=now or now_local(),
        ):
            logger.warning("Payment %s of booking %s was decided concurrently", payment.payment_id, booking_id)

        logger.info("Booking %s approved (seat %s, %s, %s)", booking_id, booking.seat_number, booking.shift.value, booking.booking_date)
        return self._get(booking_id)

    def reject_booking(
        self,
        booking_id: int,
        *,
        current_role: Role,
        admin_user_id: int,
        now: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> SeatBooking:
        """Delete a pending request (freeing the seat) and reject its pending payment, if any.

        Booked rows are final and cannot be rejected.
        """

        _require_admin(current_role)
        booking = self._get(booking_id)
        if booking.booking_status != BookingStatus.PENDING:
            raise ConflictError("Booking is already confirmed")

        if not self._bookings.delete_pending(booking.booking_id):
            if not self._bookings.get_by_id(booking.booking_id):
                raise NotFoundError("Booking not found")
            raise ConflictError("Booking is already confirmed")

        payment = self._payments.find_pending_for_booking(booking.booking_id)
        if payment:
            self._payments.decide(
                payment_id=payment.payment_id,
                status=CashPaymentStatus.REJECTED,
                decided_by=int(admin_user_id),
                decided_at=now or now_local(),
                note=note,
            )

        logger.info("Booking %s rejected by admin %s", booking_id, admin_user_id)
        return booking

    def availability(self, shift, booking_date: date) -> int:
        """Free seats. Pending requests do not hold capacity."""

        shift = parse_shift(shift)
        booked = self._bookings.count_booked(shift=shift, booking_date=booking_date)
        return max(0, self._total_seats - booked)

    def availability_overview(self, booking_date: date) -> list[ShiftAvailability]:
        overview = []
        for s in self._catalog.list_all():
            booked = self._bookings.count_booked(shift=s.shift_id, booking_date=booking_date)
            overview.append(
                ShiftAvailability(
                    shift=s.shift_id,
                    name=s.name,
                    total=self._total_seats,
                    booked=booked,
                    available=max(0, self._total_seats - booked),
                    price=s.price,
                )
            )
        return overview

    def get(self, booking_id: int) -> SeatBooking:
        return self._get(booking_id)

    def find(self, booking_id: int) -> Optional[SeatBooking]:
        return self._bookings.get_by_id(int(booking_id))

    def list_for_user(self, user_id: int, *, booking_date: Optional[date] = None) -> Sequence[SeatBooking]:
        return self._bookings.list_for_user(int(user_id), booking_date=booking_date)

    def list_for_date(self, booking_date: date, *, shift: Optional[ShiftId] = None) -> Sequence[SeatBooking]:
        return self._bookings.list_for_date(booking_date, shift=parse_shift(shift) if shift else None)

    def _get(self, booking_id: int) -> SeatBooking:
        booking = self._bookings.get_by_id(int(booking_id))
        if not booking:
            raise NotFoundError("Booking not found")
        return booking
