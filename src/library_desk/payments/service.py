from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..admissions.model import Admission
from ..admissions.repository import AdmissionRepository
from ..app_logger import get_logger
from ..bookings.service import BookingService
from ..common.datetime_utils import add_months, epoch_millis, now_local
from ..core.enums import BookingStatus, CashPaymentStatus, NotificationType, PaymentMode, PaymentStatus, Role
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    DuplicateKeyError,
    DuplicateRequest,
    NotFoundError,
)
from ..notifications.service import AuditTrail, NotificationService
from .model import CashPayment, PaymentHistoryEntry
from .repository import CashPaymentRepository, PaymentHistoryRepository

logger = get_logger("payments")

UPI_RECEIPT_PREFIX = "LCL"
CASH_RECEIPT_PREFIX = "LCL-CASH-"


def _require_admin(current_role: Role) -> None:
    if current_role != Role.ADMIN:
        raise AuthorizationError("Admin access required")


class PaymentService:
    """Gates admission activation and booking confirmation on payment.

    UPI is self-attested and applied immediately. Cash goes through an admin
    decision; decisions only apply to payments that are still pending.
    """

    def __init__(
        self,
        cash_payments: CashPaymentRepository,
        history: PaymentHistoryRepository,
        admissions: AdmissionRepository,
        bookings: BookingService,
        notifications: NotificationService,
        audit: AuditTrail,
    ):
        self._cash = cash_payments
        self._history = history
        self._admissions = admissions
        self._bookings = bookings
        self._notifications = notifications
        self._audit = audit

    # ---- student side ----

    def confirm_upi(self, *, user_id: int, admission_id: int, now: Optional[datetime] = None) -> str:
        """Mark the admission paid on the student's word. Returns the receipt number."""

        now = now or now_local()
        admission = self._own_unpaid_admission(user_id, admission_id)
        if self._cash.find_pending_for_admission(admission.admission_id):
            raise DuplicateRequest("A cash payment request for this admission is already pending")

        self._activate(admission, now)
        receipt = f"{UPI_RECEIPT_PREFIX}{epoch_millis(now)}-{admission.admission_id}"
        self._history.create(
            user_id=admission.user_id,
            amount=admission.total_amount,
            payment_mode=PaymentMode.UPI,
            duration_months=admission.duration,
            payment_date=now,
            receipt_number=receipt,
        )
        logger.info("UPI payment confirmed for admission %s (user %s, receipt %s)", admission_id, user_id, receipt)
        return receipt

    def submit_cash_payment(self, *, user_id: int, admission_id: int) -> int:
        admission = self._own_unpaid_admission(user_id, admission_id)

        if self._cash.find_pending_for_admission(admission.admission_id):
            raise DuplicateRequest("A cash payment request for this admission is already pending")
        try:
            payment_id = self._cash.create(
                user_id=admission.user_id,
                amount=admission.total_amount,
                admission_id=admission.admission_id,
            )
        except DuplicateKeyError:
            raise DuplicateRequest("A cash payment request for this admission is already pending")

        logger.info("Cash payment %s submitted for admission %s (amount %s)", payment_id, admission_id, admission.total_amount)
        return payment_id

    def history_for_user(self, user_id: int) -> Sequence[PaymentHistoryEntry]:
        return self._history.list_for_user(int(user_id))

    def cash_payments_for_user(self, user_id: int) -> Sequence[CashPayment]:
        return self._cash.list_for_user(int(user_id))

    # ---- admin side ----

    def list_pending(self, *, current_role: Role) -> Sequence[CashPayment]:
        _require_admin(current_role)
        return self._cash.list_by_status(CashPaymentStatus.PENDING)

    def approve_cash_payment(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        payment_id: int,
        now: Optional[datetime] = None,
    ) -> CashPayment:
        _require_admin(current_role)
        now = now or now_local()
        payment = self._pending_payment(payment_id)

        if payment.booking_id is not None:
            # seat first: on SeatTaken the payment stays pending for a later decision
            self._bookings.approve_booking(
                payment.booking_id,
                current_role=current_role,
                admin_user_id=admin_user_id,
                now=now,
            )
            outcome = "Your seat booking is now confirmed."
        else:
            admission = self._admissions.get_by_id(int(payment.admission_id))
            if not admission:
                raise NotFoundError("Admission not found")
            if admission.is_paid:
                raise ConflictError("This admission is already paid")
            self._decide(payment, CashPaymentStatus.APPROVED, admin_user_id, now)
            self._activate(admission, now)
            self._history.create(
                user_id=payment.user_id,
                amount=payment.amount,
                payment_mode=PaymentMode.CASH,
                duration_months=admission.duration,
                payment_date=now,
                receipt_number=f"{CASH_RECEIPT_PREFIX}{epoch_millis(now)}-{payment.payment_id}",
            )
            outcome = "Your admission is now active."

        self._record_decision("approve", payment, admin_user_id)
        self._notifications.notify(
            payment.user_id,
            "Payment Approved",
            f"Your cash payment of ₹{payment.amount} has been approved. {outcome}",
            NotificationType.SUCCESS,
            created_by=admin_user_id,
        )
        logger.info("Cash payment %s approved by admin %s (%s)", payment.payment_id, admin_user_id, payment.target.value)
        return self._cash.get_by_id(payment.payment_id) or payment

    def reject_cash_payment(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        payment_id: int,
        now: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> CashPayment:
        _require_admin(current_role)
        now = now or now_local()
        payment = self._pending_payment(payment_id)
        if payment.booking_id is not None:
            booking = self._bookings.find(payment.booking_id)
            if booking and booking.booking_status != BookingStatus.PENDING:
                raise ConflictError("Booking is already confirmed")

        self._decide(payment, CashPaymentStatus.REJECTED, admin_user_id, now, note=note)
        if payment.booking_id is not None:
            try:
                self._bookings.reject_booking(
                    payment.booking_id,
                    current_role=current_role,
                    admin_user_id=admin_user_id,
                    now=now,
                )
            except NotFoundError:
                logger.info("Booking %s of rejected payment %s was already removed", payment.booking_id, payment.payment_id)
        else:
            self._admissions.set_payment_status(admission_id=int(payment.admission_id), status=PaymentStatus.PENDING)

        self._record_decision("reject", payment, admin_user_id)
        self._notifications.notify(
            payment.user_id,
            "Payment Rejected",
            f"Your cash payment of ₹{payment.amount} has been rejected. Please contact the library for more information.",
            NotificationType.ERROR,
            created_by=admin_user_id,
        )
        logger.info("Cash payment %s rejected by admin %s (%s)", payment.payment_id, admin_user_id, payment.target.value)
        return self._cash.get_by_id(payment.payment_id) or payment

    def approve_booking_request(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        booking_id: int,
        now: Optional[datetime] = None,
    ) -> CashPayment:
        """Admin shortcut from the booking list: decide through the booking's pending payment."""

        _require_admin(current_role)
        payment = self._pending_for_booking(booking_id)
        return self.approve_cash_payment(
            current_role=current_role,
            admin_user_id=admin_user_id,
            payment_id=payment.payment_id,
            now=now,
        )

    def reject_booking_request(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        booking_id: int,
        now: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> CashPayment:
        _require_admin(current_role)
        payment = self._pending_for_booking(booking_id)
        return self.reject_cash_payment(
            current_role=current_role,
            admin_user_id=admin_user_id,
            payment_id=payment.payment_id,
            now=now,
            note=note,
        )

    # ---- helpers ----

    def _own_unpaid_admission(self, user_id: int, admission_id: int) -> Admission:
        admission = self._admissions.get_by_id(int(admission_id))
        if not admission or admission.user_id != int(user_id):
            raise NotFoundError("Admission not found")
        if admission.is_paid:
            raise ConflictError("This admission is already paid")
        return admission

    def _activate(self, admission: Admission, now: datetime) -> None:
        ok = self._admissions.mark_paid(
            admission_id=admission.admission_id,
            paid_at=now,
            start_date=now,
            end_date=add_months(now, admission.duration),
        )
        if not ok:
            # conditional on pending: a concurrent payment got there first
            raise ConflictError("This admission is already paid")

    def _pending_payment(self, payment_id: int) -> CashPayment:
        payment = self._cash.get_by_id(int(payment_id))
        if not payment:
            raise NotFoundError("Payment not found")
        if not payment.is_pending:
            raise ConflictError(f"Payment has already been {payment.status.value}")
        return payment

    def _pending_for_booking(self, booking_id: int) -> CashPayment:
        self._bookings.get(booking_id)
        payment = self._cash.find_pending_for_booking(int(booking_id))
        if not payment:
            raise ConflictError("This booking has no pending payment to review")
        return payment

    def _decide(
        self,
        payment: CashPayment,
        status: CashPaymentStatus,
        admin_user_id: int,
        now: datetime,
        *,
        note: Optional[str] = None,
    ) -> None:
        if not self._cash.decide(
            payment_id=payment.payment_id,
            status=status,
            decided_by=int(admin_user_id),
            decided_at=now,
            note=note,
        ):
            raise ConflictError("Payment was already reviewed by another admin")

    def _record_decision(self, action: str, payment: CashPayment, admin_user_id: int) -> None:
        self._audit.record(
            admin_id=admin_user_id,
            action=f"{action}_cash_payment",
            target_user_id=payment.user_id,
            details={
                "payment_id": payment.payment_id,
                "amount": str(payment.amount),
                "payment_type": payment.target.value,
            },
        )
