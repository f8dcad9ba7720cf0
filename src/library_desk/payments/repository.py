from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import CashPaymentStatus, PaymentMode
from .model import CashPayment, PaymentHistoryEntry


class CashPaymentRepository(Protocol):
    def create(
        self,
        *,
        user_id: int,
        amount: Decimal,
        booking_id: Optional[int] = None,
        admission_id: Optional[int] = None,
    ) -> int:
        """Raises DuplicateKeyError when the target already has a pending payment."""

        raise NotImplementedError

    def get_by_id(self, payment_id: int) -> Optional[CashPayment]:
        raise NotImplementedError

    def find_pending_for_booking(self, booking_id: int) -> Optional[CashPayment]:
        raise NotImplementedError

    def find_pending_for_admission(self, admission_id: int) -> Optional[CashPayment]:
        raise NotImplementedError

    def decide(
        self,
        *,
        payment_id: int,
        status: CashPaymentStatus,
        decided_by: int,
        decided_at: datetime,
        note: Optional[str] = None,
    ) -> bool:
        """pending -> status. False when the payment is no longer pending."""

        raise NotImplementedError

    def list_by_status(self, status: CashPaymentStatus, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[CashPayment]:
        raise NotImplementedError

    def list_for_user(self, user_id: int, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[CashPayment]:
        raise NotImplementedError


class PaymentHistoryRepository(Protocol):
    def create(
        self,
        *,
        user_id: int,
        amount: Decimal,
        payment_mode: PaymentMode,
        duration_months: int,
        payment_date: datetime,
        receipt_number: str,
    ) -> int:
        raise NotImplementedError

    def list_for_user(self, user_id: int, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[PaymentHistoryEntry]:
        raise NotImplementedError
