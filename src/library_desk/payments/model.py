from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import CashPaymentStatus, PaymentMode, PaymentTarget


@dataclass(frozen=True)
class CashPayment:
    """A cash payment awaiting (or past) admin review.

    Exactly one of booking_id / admission_id is set.
    """

    payment_id: int
    user_id: int
    amount: Decimal
    status: CashPaymentStatus
    booking_id: Optional[int] = None
    admission_id: Optional[int] = None
    admin_notes: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def target(self) -> PaymentTarget:
        return PaymentTarget.BOOKING if self.booking_id is not None else PaymentTarget.ADMISSION

    @property
    def is_pending(self) -> bool:
        return self.status == CashPaymentStatus.PENDING


@dataclass(frozen=True)
class PaymentHistoryEntry:
    history_id: int
    user_id: int
    amount: Decimal
    payment_mode: PaymentMode
    duration_months: int
    payment_date: datetime
    receipt_number: str
    created_at: Optional[datetime] = None
