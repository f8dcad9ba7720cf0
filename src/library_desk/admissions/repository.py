from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import PaymentStatus
from .model import Admission, NewAdmission


class AdmissionRepository(Protocol):
    def create(self, admission: NewAdmission) -> int:
        raise NotImplementedError

    def get_by_id(self, admission_id: int) -> Optional[Admission]:
        raise NotImplementedError

    def get_latest_for_user(self, user_id: int) -> Optional[Admission]:
        """Most recently created admission ("current")."""

        raise NotImplementedError

    def list_by_payment_status(self, status: PaymentStatus) -> Sequence[Admission]:
        raise NotImplementedError

    def mark_paid(self, *, admission_id: int, paid_at: datetime, start_date: datetime, end_date: datetime) -> bool:
        """pending -> paid. False when the admission is missing or already paid."""

        raise NotImplementedError

    def set_payment_status(self, *, admission_id: int, status: PaymentStatus) -> bool:
        raise NotImplementedError

    def set_end_date(self, *, admission_id: int, end_date: datetime) -> bool:
        raise NotImplementedError
