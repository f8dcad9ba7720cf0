from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..admissions.repository import AdmissionRepository
from ..app_logger import get_logger
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..core.constants import ABSENT_REASON_NO_CHECKIN
from ..core.enums import AttendanceStatus, PaymentStatus, ShiftId
from ..core.exceptions import DuplicateKeyError
from ..shifts.catalog import ShiftCatalog

logger = get_logger("absence")


@dataclass(frozen=True)
class AbsentStudent:
    user_id: int
    shift: ShiftId
    date: date
    status: str = AttendanceStatus.ABSENT.value
    reason: str = ABSENT_REASON_NO_CHECKIN

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "shift": self.shift.value,
            "date": self.date.isoformat(),
            "status": self.status,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class AbsenceReport:
    date: date
    absent_students: list[AbsentStudent] = field(default_factory=list)

    @property
    def absent_count(self) -> int:
        return len(self.absent_students)


class AbsenceDetector:
    """Turns "no check-in by shift end" into stored absent rows for one date.

    Not self-scheduling; an external caller decides when to run it. Re-running
    is safe: the (user, shift, date, status) key on attendance rows absorbs
    repeats, and only rows created by this run are reported.
    """

    def __init__(
        self,
        admissions: AdmissionRepository,
        attendance: AttendanceRepository,
        catalog: Optional[ShiftCatalog] = None,
    ):
        self._admissions = admissions
        self._attendance = attendance
        self._catalog = catalog or ShiftCatalog()

    def run(self, check_date: Optional[date] = None, *, now: Optional[datetime] = None) -> AbsenceReport:
        # "ended" is judged on the current hour, whatever date is being checked
        now = now or now_local()
        check_date = check_date or now.date()

        candidates: dict[tuple[int, ShiftId], None] = {}
        for admission in self._admissions.list_by_payment_status(PaymentStatus.PAID):
            if not admission.covers(check_date):
                continue
            for shift in admission.selected_shifts:
                candidates.setdefault((admission.user_id, shift), None)

        checked_in = set()
        already_absent = set()
        for row in self._attendance.list_for_date(check_date):
            if row.check_in_time is not None:
                checked_in.add((row.user_id, row.shift))
            elif row.status == AttendanceStatus.ABSENT:
                already_absent.add((row.user_id, row.shift))

        flagged = []
        for user_id, shift in candidates:
            if not self._catalog.shift_has_ended(shift, now):
                continue
            if (user_id, shift) in checked_in or (user_id, shift) in already_absent:
                continue
            try:
                self._attendance.create_absent(
                    user_id=user_id,
                    shift=shift,
                    work_date=check_date,
                    reason=ABSENT_REASON_NO_CHECKIN,
                )
            except DuplicateKeyError:
                # a concurrent sweep got there first
                continue
            flagged.append(AbsentStudent(user_id=user_id, shift=shift, date=check_date))

        logger.info("Absence sweep for %s: %s newly absent", check_date.isoformat(), len(flagged))
        return AbsenceReport(date=check_date, absent_students=flagged)
