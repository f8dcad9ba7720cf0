from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, ShiftDayStatus, ShiftId


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one stored attendance row (a check-in session or an absence mark)."""

    attendance_id: int
    user_id: int
    shift: ShiftId
    work_date: date
    status: AttendanceStatus
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    reason: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.check_in_time is not None and self.check_out_time is None

    @property
    def is_completed(self) -> bool:
        return self.check_in_time is not None and self.check_out_time is not None


@dataclass(frozen=True)
class ShiftDayView:
    """Derived status of one shift for one user today."""

    shift: ShiftId
    status: ShiftDayStatus
    time_range: str
    is_active: bool
    attendance_id: Optional[int] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
