import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime

import pytest

from library_desk.core.enums import ShiftDayStatus, ShiftId
from library_desk.core.exceptions import (
    AlreadyCheckedIn,
    NotFoundError,
    OutsideShiftWindow,
    ShiftAlreadyCompleted,
    ValidationError,
)

DAY = date(2025, 1, 10)


def at(hour, minute=0, day=DAY):
    return datetime(day.year, day.month, day.day, hour, minute)


@pytest.fixture()
def student(repos):
    repos.admissions.add(user_id=30, shifts=[ShiftId.MORNING, ShiftId.EVENING])
    return 30


def test_check_in_then_duplicate_is_rejected(container, repos, student):
    attendance_id = container.attendance_service.check_in(user_id=student, shift="evening", now=at(18))

    row = repos.attendance.get_by_id(attendance_id)
    assert row.check_in_time == at(18)
    assert row.check_out_time is None

    with pytest.raises(AlreadyCheckedIn):
        container.attendance_service.check_in(user_id=student, shift="evening", now=at(18, 30))


def test_check_in_outside_window(container, student):
    with pytest.raises(OutsideShiftWindow):
        container.attendance_service.check_in(user_id=student, shift="evening", now=at(21))
    with pytest.raises(OutsideShiftWindow):
        container.attendance_service.check_in(user_id=student, shift="morning", now=at(4, 59))


def test_check_in_requires_the_shift_in_the_admission(container, student):
    with pytest.raises(ValidationError):
        container.attendance_service.check_in(user_id=student, shift="noon", now=at(12))
    with pytest.raises(ValidationError):
        container.attendance_service.check_in(user_id=999, shift="noon", now=at(12))


def test_check_out_and_completed_shift(container, repos, student):
    attendance_id = container.attendance_service.check_in(user_id=student, shift="morning", now=at(6))

    with pytest.raises(OutsideShiftWindow):
        container.attendance_service.check_out(attendance_id=attendance_id, shift="morning", now=at(12))

    container.attendance_service.check_out(attendance_id=attendance_id, shift="morning", now=at(10, 30))
    assert repos.attendance.get_by_id(attendance_id).check_out_time == at(10, 30)

    with pytest.raises(ShiftAlreadyCompleted):
        container.attendance_service.check_out(attendance_id=attendance_id, now=at(10, 45))
    with pytest.raises(ShiftAlreadyCompleted):
        container.attendance_service.check_in(user_id=student, shift="morning", now=at(10, 50))


def test_check_out_unknown_or_foreign_row(container, student):
    attendance_id = container.attendance_service.check_in(user_id=student, shift="morning", now=at(6))

    with pytest.raises(NotFoundError):
        container.attendance_service.check_out(attendance_id=999, now=at(7))
    with pytest.raises(NotFoundError):
        container.attendance_service.check_out(attendance_id=attendance_id, now=at(7), user_id=31)


def test_store_key_rejects_racing_check_in(container, repos, student, monkeypatch):
    container.attendance_service.check_in(user_id=student, shift="morning", now=at(6))
    monkeypatch.setattr(repos.attendance, "list_for_user_and_date", lambda user_id, work_date: [])

    with pytest.raises(AlreadyCheckedIn):
        container.attendance_service.check_in(user_id=student, shift="morning", now=at(6, 1))


def test_concurrent_check_ins_leave_one_open_row(container, repos, student):
    barrier = threading.Barrier(4)

    def attempt(_):
        barrier.wait()
        try:
            container.attendance_service.check_in(user_id=student, shift="morning", now=at(7))
            return True
        except AlreadyCheckedIn:
            return False

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(attempt, range(4)))

    assert results.count(True) == 1
    assert len(repos.attendance.list_for_user_and_date(student, DAY)) == 1


def test_today_status(container, student):
    service = container.attendance_service

    before = {v.shift: v for v in service.today_status(student, now=at(12))}
    assert before[ShiftId.MORNING].status == ShiftDayStatus.ABSENT
    assert before[ShiftId.EVENING].status == ShiftDayStatus.PENDING
    assert not before[ShiftId.EVENING].is_active

    attendance_id = service.check_in(user_id=student, shift="evening", now=at(17))
    during = {v.shift: v for v in service.today_status(student, now=at(17, 5))}
    assert during[ShiftId.EVENING].status == ShiftDayStatus.CHECKED_IN
    assert during[ShiftId.EVENING].attendance_id == attendance_id
    assert during[ShiftId.EVENING].time_range == "04:00 PM - 09:00 PM"

    service.check_out(attendance_id=attendance_id, now=at(20))
    after = {v.shift: v for v in service.today_status(student, now=at(20, 1))}
    assert after[ShiftId.EVENING].status == ShiftDayStatus.PRESENT

    assert service.today_status(999, now=at(12)) == []


def test_history_covers_last_week_newest_first(container, repos, student):
    service = container.attendance_service
    service.check_in(user_id=student, shift="morning", now=at(6, day=date(2025, 1, 1)))
    service.check_in(user_id=student, shift="morning", now=at(6, day=date(2025, 1, 5)))
    repos.attendance.create_absent(user_id=student, shift=ShiftId.EVENING, work_date=date(2025, 1, 9), reason="no_checkin")

    rows = service.history(student, today=DAY)

    assert [r.work_date for r in rows] == [date(2025, 1, 9), date(2025, 1, 5)]
    assert rows[0].reason == "no_checkin"
