from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..admissions.service import AdmissionService
from ..app_logger import get_logger
from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_HISTORY_DAYS
from ..core.exceptions import (
    AlreadyCheckedIn,
    DuplicateKeyError,
    NotFoundError,
    OutsideShiftWindow,
    ShiftAlreadyCompleted,
)
from ..shifts.catalog import ShiftCatalog, parse_shift
from .model import AttendanceRecord, ShiftDayView
from .repository import AttendanceRepository
from .status import classify_shift, presence_row

logger = get_logger("attendance")


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        admissions: Optional[AdmissionService] = None,
        catalog: Optional[ShiftCatalog] = None,
    ):
        self._attendance = attendance
        self._admissions = admissions
        self._catalog = catalog or ShiftCatalog()

    def _require_window(self, shift, now: datetime) -> None:
        if not self._catalog.is_now_within(shift, now):
            raise OutsideShiftWindow(
                f"You can only check in/out during {self._catalog.get(shift).name} shift hours "
                f"({self._catalog.time_range_of(shift)})"
            )

    def check_in(self, *, user_id: int, shift, now: Optional[datetime] = None) -> int:
        now = now or now_local()
        shift = parse_shift(shift)
        user_id = int(user_id)
        today = now.date()

        self._require_window(shift, now)
        if self._admissions is not None:
            self._admissions.require_enrolled(user_id, shift, paid=False)

        existing = presence_row(self._attendance.list_for_user_and_date(user_id, today), shift)
        if existing is not None:
            if existing.is_open:
                raise AlreadyCheckedIn("You are already checked in for this shift")
            raise ShiftAlreadyCompleted("You have already completed this shift today")

        try:
            attendance_id = self._attendance.create_check_in(
                user_id=user_id,
                shift=shift,
                work_date=today,
                check_in_time=now,
            )
        except DuplicateKeyError:
            raise AlreadyCheckedIn("You are already checked in for this shift")

        logger.info("User %s checked in to %s shift (attendance %s)", user_id, shift.value, attendance_id)
        return attendance_id

    def check_out(
        self,
        *,
        attendance_id: int,
        shift=None,
        now: Optional[datetime] = None,
        user_id: Optional[int] = None,
    ) -> None:
        now = now or now_local()
        record = self._attendance.get_by_id(int(attendance_id))
        if not record or (user_id is not None and record.user_id != int(user_id)):
            raise NotFoundError("Attendance record not found")

        shift = parse_shift(shift) if shift else record.shift
        self._require_window(shift, now)

        if record.check_in_time is None:
            raise NotFoundError("No check-in found for this record")
        if not self._attendance.set_check_out(attendance_id=record.attendance_id, check_out_time=now):
            raise ShiftAlreadyCompleted("You have already checked out of this shift")

        logger.info("User %s checked out of %s shift (attendance %s)", record.user_id, shift.value, attendance_id)

    def today_status(self, user_id: int, *, now: Optional[datetime] = None) -> list[ShiftDayView]:
        now = now or now_local()
        if self._admissions is None:
            return []
        admission = self._admissions.current_for_user(int(user_id))
        if not admission:
            return []

        rows = self._attendance.list_for_user_and_date(int(user_id), now.date())
        views = []
        for shift in admission.selected_shifts:
            row = presence_row(rows, shift)
            views.append(
                ShiftDayView(
                    shift=shift,
                    status=classify_shift(rows, shift, now, self._catalog),
                    time_range=self._catalog.time_range_of(shift),
                    is_active=self._catalog.is_now_within(shift, now),
                    attendance_id=row.attendance_id if row else None,
                    check_in_time=row.check_in_time if row else None,
                    check_out_time=row.check_out_time if row else None,
                )
            )
        return views

    def history(self, user_id: int, *, today: Optional[date] = None, days: int = DEFAULT_HISTORY_DAYS) -> Sequence[AttendanceRecord]:
        today = today or now_local().date()
        return self._attendance.list_for_user_since(int(user_id), today - timedelta(days=int(days)))
