import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime

from library_desk.core.enums import AttendanceStatus, ShiftId

DAY = date(2025, 1, 10)


def at(hour, minute=0):
    return datetime(2025, 1, 10, hour, minute)


def absent_rows(repos):
    return [r for r in repos.attendance.list_for_date(DAY) if r.status == AttendanceStatus.ABSENT]


def test_sweep_marks_missing_check_in_once(container, repos):
    repos.admissions.add(user_id=40, shifts=[ShiftId.MORNING])

    first = container.absence_detector.run(DAY, now=at(12))
    second = container.absence_detector.run(DAY, now=at(13))

    assert first.absent_count == 1
    assert first.absent_students[0].to_dict() == {
        "user_id": 40,
        "shift": "morning",
        "date": "2025-01-10",
        "status": "absent",
        "reason": "no_checkin",
    }
    assert second.absent_count == 0
    assert len(absent_rows(repos)) == 1
    assert absent_rows(repos)[0].reason == "no_checkin"


def test_sweep_skips_checked_in_unended_and_unpaid(container, repos):
    repos.admissions.add(user_id=41, shifts=[ShiftId.MORNING, ShiftId.EVENING])
    repos.admissions.add(user_id=42, shifts=[ShiftId.MORNING], paid=False)
    repos.attendance.create_check_in(user_id=41, shift=ShiftId.MORNING, work_date=DAY, check_in_time=at(6))

    report = container.absence_detector.run(DAY, now=at(12))

    assert report.absent_count == 0
    assert absent_rows(repos) == []


def test_night_counts_as_ended_during_the_day(container, repos):
    repos.admissions.add(user_id=43, shifts=[ShiftId.NIGHT])

    assert container.absence_detector.run(DAY, now=at(22)).absent_count == 0
    assert container.absence_detector.run(DAY, now=at(12)).absent_count == 1


def test_renewals_are_deduplicated_and_period_is_respected(container, repos):
    repos.admissions.add(user_id=44, shifts=[ShiftId.MORNING])
    repos.admissions.add(user_id=44, shifts=[ShiftId.MORNING, ShiftId.NOON])
    repos.admissions.add(
        user_id=45,
        shifts=[ShiftId.MORNING],
        start=datetime(2024, 11, 1),
        end=datetime(2024, 12, 1),
    )

    report = container.absence_detector.run(DAY, now=at(17))

    assert sorted((s.user_id, s.shift.value) for s in report.absent_students) == [(44, "morning"), (44, "noon")]


def test_defaults_to_today(container, repos):
    repos.admissions.add(user_id=46, shifts=[ShiftId.MORNING])

    report = container.absence_detector.run(now=at(12))

    assert report.date == DAY
    assert report.absent_count == 1


def test_rows_written_by_a_concurrent_sweep_are_not_reported(container, repos, monkeypatch):
    repos.admissions.add(user_id=47, shifts=[ShiftId.MORNING])
    container.absence_detector.run(DAY, now=at(12))
    # the next sweep read its snapshot before the first one committed
    monkeypatch.setattr(repos.attendance, "list_for_date", lambda work_date: [])

    report = container.absence_detector.run(DAY, now=at(12))

    assert report.absent_count == 0
    assert len([r for r in repos.attendance.rows.values() if r.status == AttendanceStatus.ABSENT]) == 1


def test_parallel_sweeps_never_double_mark(container, repos):
    for user_id in range(50, 60):
        repos.admissions.add(user_id=user_id, shifts=[ShiftId.MORNING, ShiftId.NOON])
    barrier = threading.Barrier(3)

    def sweep(_):
        barrier.wait()
        return container.absence_detector.run(DAY, now=at(17)).absent_count

    with ThreadPoolExecutor(max_workers=3) as pool:
        counts = list(pool.map(sweep, range(3)))

    assert sum(counts) == 20
    assert len(absent_rows(repos)) == 20
