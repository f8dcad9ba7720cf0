from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import PaymentStatus, ShiftId


@dataclass(frozen=True)
class Admission:
    """Domain entity: a student's enrollment for a period (renewals add new rows)."""

    admission_id: int
    user_id: int
    name: str
    age: int
    contact_number: str
    full_address: str
    email: str
    course_name: str
    father_name: str
    father_contact: str
    duration: int
    selected_shifts: tuple[ShiftId, ...]
    registration_fee: Decimal
    shift_fee: Decimal
    total_amount: Decimal
    payment_status: PaymentStatus
    payment_date: Optional[datetime] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID

    def covers(self, day: date) -> bool:
        """True when `day` falls inside the paid period (open bounds count as covered)."""

        if self.start_date and day < self.start_date.date():
            return False
        if self.end_date and day > self.end_date.date():
            return False
        return True


@dataclass(frozen=True)
class NewAdmission:
    """Validated intake form, ready to be persisted."""

    user_id: int
    name: str
    age: int
    contact_number: str
    full_address: str
    email: str
    course_name: str
    father_name: str
    father_contact: str
    duration: int
    selected_shifts: tuple[ShiftId, ...]
    registration_fee: Decimal
    shift_fee: Decimal
    total_amount: Decimal
