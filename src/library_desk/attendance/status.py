"""Per-shift, per-day attendance classification derived from stored rows."""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from ..core.enums import AttendanceStatus, ShiftDayStatus, ShiftId
from ..shifts.catalog import ShiftCatalog
from .model import AttendanceRecord

_DEFAULT_CATALOG = ShiftCatalog()


def presence_row(rows: Iterable[AttendanceRecord], shift: ShiftId) -> Optional[AttendanceRecord]:
    for row in rows:
        if row.shift == shift and row.check_in_time is not None:
            return row
    return None


def classify_shift(
    rows: Iterable[AttendanceRecord],
    shift: ShiftId,
    now: datetime,
    catalog: Optional[ShiftCatalog] = None,
) -> ShiftDayStatus:
    """Classify one shift from the user's rows for a single day.

    A check-in always wins over an absence mark. Without either, a shift whose
    window has ended reads as absent even before the sweep has stored the row.
    """

    rows = [r for r in rows if r.shift == shift]
    present = presence_row(rows, shift)
    if present is not None:
        return ShiftDayStatus.PRESENT if present.check_out_time is not None else ShiftDayStatus.CHECKED_IN

    if any(r.status == AttendanceStatus.ABSENT for r in rows):
        return ShiftDayStatus.ABSENT
    if (catalog or _DEFAULT_CATALOG).shift_has_ended(shift, now):
        return ShiftDayStatus.ABSENT
    return ShiftDayStatus.PENDING
