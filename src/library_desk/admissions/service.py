from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional

from ..app_logger import get_logger
from ..common.datetime_utils import add_months, now_local
from ..common.validators import require_email, require_int_in_range, require_mobile, require_non_empty
from ..core.constants import ALLOWED_DURATIONS, REGISTRATION_FEE
from ..core.enums import Role, ShiftId
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..notifications.service import AuditTrail
from ..shifts.catalog import ShiftCatalog, parse_shift
from .model import Admission, NewAdmission
from .repository import AdmissionRepository

logger = get_logger("admissions")


class AdmissionService:
    def __init__(
        self,
        admissions: AdmissionRepository,
        catalog: Optional[ShiftCatalog] = None,
        *,
        audit: Optional[AuditTrail] = None,
    ):
        self._admissions = admissions
        self._catalog = catalog or ShiftCatalog()
        self._audit = audit

    def submit(
        self,
        *,
        user_id: int,
        name: str,
        age,
        contact_number: str,
        full_address: str,
        email: str,
        course_name: str,
        father_name: str,
        father_contact: str,
        duration,
        selected_shifts: Iterable[str],
    ) -> int:
        shifts = tuple(dict.fromkeys(parse_shift(s) for s in (selected_shifts or [])))
        if not shifts:
            raise ValidationError("Please select at least one shift")

        duration = require_int_in_range(duration, "Duration", low=min(ALLOWED_DURATIONS), high=max(ALLOWED_DURATIONS))
        if duration not in ALLOWED_DURATIONS:
            raise ValidationError("Duration must be 1, 3 or 6 months")

        shift_fee = Decimal(self._catalog.fee_for(shifts))
        registration_fee = Decimal(REGISTRATION_FEE)

        admission = NewAdmission(
            user_id=int(user_id),
            name=require_non_empty(name, "Name"),
            age=require_int_in_range(age, "Age", low=1, high=149),
            contact_number=require_mobile(contact_number, "Contact number"),
            full_address=require_non_empty(full_address, "Address"),
            email=require_email(email),
            course_name=require_non_empty(course_name, "Course name"),
            father_name=require_non_empty(father_name, "Father's name"),
            father_contact=require_mobile(father_contact, "Father's contact"),
            duration=duration,
            selected_shifts=shifts,
            registration_fee=registration_fee,
            shift_fee=shift_fee,
            total_amount=shift_fee + registration_fee,
        )
        admission_id = self._admissions.create(admission)
        logger.info(
            "Admission %s submitted by user %s (shifts=%s, total=%s)",
            admission_id,
            user_id,
            ",".join(s.value for s in shifts),
            admission.total_amount,
        )
        return admission_id

    def current_for_user(self, user_id: int) -> Optional[Admission]:
        return self._admissions.get_latest_for_user(int(user_id))

    def require_enrolled(self, user_id: int, shift: ShiftId, *, paid: bool = True) -> Admission:
        """Gate for booking/attendance: the current admission must include the shift."""

        admission = self.current_for_user(user_id)
        if not admission:
            raise ValidationError("Please complete your admission first")
        if paid and not admission.is_paid:
            raise ValidationError("Please complete your admission payment first")
        if shift not in admission.selected_shifts:
            raise ValidationError(f"The {shift.value} shift is not part of your admission")
        return admission

    @staticmethod
    def remaining_days(admission: Admission, today: date) -> int:
        if not admission.end_date:
            return 0
        return max(0, (admission.end_date.date() - today).days)

    def extend_subscription(
        self,
        *,
        current_role: Role,
        admin_user_id: int,
        admission_id: int,
        months,
        now: Optional[datetime] = None,
    ) -> Admission:
        """Admin grant: push end_date forward (from now when the admission has none)."""

        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin access required")
        months = require_int_in_range(months, "Months", low=1, high=12)

        admission = self._admissions.get_by_id(int(admission_id))
        if not admission:
            raise NotFoundError("Admission not found")

        new_end = add_months(admission.end_date or now or now_local(), months)
        if not self._admissions.set_end_date(admission_id=admission.admission_id, end_date=new_end):
            raise NotFoundError("Admission not found")

        if self._audit is not None:
            self._audit.record(
                admin_id=admin_user_id,
                action="extend_subscription",
                target_user_id=admission.user_id,
                details={"months": months, "new_end_date": new_end.isoformat()},
            )
        logger.info("Admission %s extended by %s month(s) to %s", admission_id, months, new_end.date())
        return self._admissions.get_by_id(admission.admission_id) or admission
