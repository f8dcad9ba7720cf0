from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ShiftId
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_user_and_date(self, user_id: int, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_user_since(self, user_id: int, since: date) -> Sequence[AttendanceRecord]:
        """Rows with work_date >= since, newest first."""

        raise NotImplementedError

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create_check_in(self, *, user_id: int, shift: ShiftId, work_date: date, check_in_time: datetime) -> int:
        """Raises DuplicateKeyError when a present row already exists for (user, shift, date)."""

        raise NotImplementedError

    def set_check_out(self, *, attendance_id: int, check_out_time: datetime) -> bool:
        """Close an open session. False when the row is missing or already closed."""

        raise NotImplementedError

    def create_absent(self, *, user_id: int, shift: ShiftId, work_date: date, reason: str) -> int:
        """Raises DuplicateKeyError when the absence is already recorded."""

        raise NotImplementedError
