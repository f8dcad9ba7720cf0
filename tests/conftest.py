"""In-memory repositories shared by the test suite.

The fakes emulate the unique keys from database/schema.sql (raising
DuplicateKeyError) and guard their state with a lock so concurrency tests
behave like the real store: checks and writes are atomic per call.
"""
from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from library_desk.admissions.model import Admission, NewAdmission
from library_desk.attendance.model import AttendanceRecord
from library_desk.bookings.model import SeatBooking
from library_desk.container import wire_services
from library_desk.core.enums import (
    ApprovalStatus,
    AttendanceStatus,
    BookingStatus,
    CashPaymentStatus,
    PaymentStatus,
    Role,
)
from library_desk.core.exceptions import DuplicateKeyError
from library_desk.notifications.model import AdminLogEntry, Notification
from library_desk.payments.model import CashPayment, PaymentHistoryEntry
from library_desk.users.model import User


class FakeUsersRepo:
    def __init__(self):
        self._ids = itertools.count(1)
        self.users: dict[int, User] = {}

    def get_by_id(self, user_id):
        return self.users.get(int(user_id))

    def get_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    def create_user(self, *, email, full_name, mobile_number, password_hash, role, approval_status):
        if self.get_by_email(email):
            raise DuplicateKeyError("duplicate email", key="uq_users_email")
        user_id = next(self._ids)
        self.users[user_id] = User(
            user_id=user_id,
            email=email,
            full_name=full_name,
            mobile_number=mobile_number,
            password_hash=password_hash,
            role=role,
            approval_status=approval_status,
        )
        return user_id

    def set_approval(self, user_id, *, status, decided_by, decided_at):
        user = self.users.get(int(user_id))
        if not user:
            return False
        self.users[user.user_id] = replace(user, approval_status=status, approved_by=decided_by, approved_at=decided_at)
        return True

    def list_by_approval(self, status, *, limit=200):
        return [u for u in self.users.values() if u.approval_status == status][:limit]


class FakeAdmissionsRepo:
    def __init__(self):
        self._ids = itertools.count(1)
        self._clock = itertools.count(1)
        self.rows: dict[int, Admission] = {}

    def create(self, admission: NewAdmission):
        admission_id = next(self._ids)
        self.rows[admission_id] = Admission(
            admission_id=admission_id,
            payment_status=PaymentStatus.PENDING,
            created_at=datetime(2025, 1, 1).replace(microsecond=next(self._clock)),
            **{k: getattr(admission, k) for k in NewAdmission.__dataclass_fields__},
        )
        return admission_id

    def add(self, *, user_id, shifts, paid=True, duration=1, start=None, end=None, total="349.00"):
        """Shortcut for tests that only need an existing admission row."""

        admission_id = self.create(
            NewAdmission(
                user_id=user_id,
                name="Student",
                age=20,
                contact_number="9876543210",
                full_address="1 Library Road",
                email=f"student{user_id}@example.com",
                course_name="UPSC",
                father_name="Father",
                father_contact="9876543211",
                duration=duration,
                selected_shifts=tuple(shifts),
                registration_fee=Decimal("50.00"),
                shift_fee=Decimal(total) - Decimal("50.00"),
                total_amount=Decimal(total),
            )
        )
        if paid:
            self.rows[admission_id] = replace(
                self.rows[admission_id],
                payment_status=PaymentStatus.PAID,
                start_date=start,
                end_date=end,
            )
        return admission_id

    def get_by_id(self, admission_id):
        return self.rows.get(int(admission_id))

    def get_latest_for_user(self, user_id):
        mine = [a for a in list(self.rows.values()) if a.user_id == int(user_id)]
        return max(mine, key=lambda a: a.created_at) if mine else None

    def list_by_payment_status(self, status):
        return [a for a in list(self.rows.values()) if a.payment_status == status]

    def mark_paid(self, *, admission_id, paid_at, start_date, end_date):
        row = self.rows.get(int(admission_id))
        if not row or row.payment_status != PaymentStatus.PENDING:
            return False
        self.rows[row.admission_id] = replace(
            row,
            payment_status=PaymentStatus.PAID,
            payment_date=paid_at,
            start_date=start_date,
            end_date=end_date,
        )
        return True

    def set_payment_status(self, *, admission_id, status):
        row = self.rows.get(int(admission_id))
        if not row:
            return False
        self.rows[row.admission_id] = replace(row, payment_status=status)
        return True

    def set_end_date(self, *, admission_id, end_date):
        row = self.rows.get(int(admission_id))
        if not row:
            return False
        self.rows[row.admission_id] = replace(row, end_date=end_date)
        return True


class FakeBookingsRepo:
    """Emulates uq_seat_booked and uq_user_active_booking."""

    def __init__(self):
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self.rows: dict[int, SeatBooking] = {}

    def get_by_id(self, booking_id):
        return self.rows.get(int(booking_id))

    def find_active_for_user(self, *, user_id, shift, booking_date):
        return self._active(user_id, shift, booking_date)

    def _active(self, user_id, shift, booking_date):
        return next(
            (
                b
                for b in list(self.rows.values())
                if b.user_id == user_id and b.shift == shift and b.booking_date == booking_date and b.is_active
            ),
            None,
        )

    def find_booked_seat(self, *, shift, seat_number, booking_date):
        return self._booked(shift, seat_number, booking_date)

    def _booked(self, shift, seat_number, booking_date):
        return next(
            (
                b
                for b in list(self.rows.values())
                if b.shift == shift
                and b.seat_number == seat_number
                and b.booking_date == booking_date
                and b.booking_status == BookingStatus.BOOKED
            ),
            None,
        )

    def create_pending(self, *, user_id, shift, seat_number, booking_date):
        with self._lock:
            if self._active(user_id, shift, booking_date):
                raise DuplicateKeyError("duplicate", key="uq_user_active_booking")
            booking_id = next(self._ids)
            self.rows[booking_id] = SeatBooking(
                booking_id=booking_id,
                user_id=user_id,
                shift=shift,
                seat_number=seat_number,
                booking_status=BookingStatus.PENDING,
                booking_date=booking_date,
            )
            return booking_id

    def mark_booked(self, booking_id):
        with self._lock:
            row = self.rows.get(int(booking_id))
            if not row or row.booking_status != BookingStatus.PENDING:
                return False
            if self._booked(row.shift, row.seat_number, row.booking_date):
                raise DuplicateKeyError("duplicate", key="uq_seat_booked")
            self.rows[row.booking_id] = replace(row, booking_status=BookingStatus.BOOKED)
            return True

    def delete_pending(self, booking_id):
        with self._lock:
            row = self.rows.get(int(booking_id))
            if not row or row.booking_status != BookingStatus.PENDING:
                return False
            del self.rows[row.booking_id]
            return True

    def count_booked(self, *, shift, booking_date):
        return sum(
            1
            for b in list(self.rows.values())
            if b.shift == shift and b.booking_date == booking_date and b.booking_status == BookingStatus.BOOKED
        )

    def list_for_user(self, user_id, *, booking_date=None):
        return [
            b
            for b in list(self.rows.values())
            if b.user_id == int(user_id) and (booking_date is None or b.booking_date == booking_date)
        ]

    def list_for_date(self, booking_date, *, shift=None):
        return [b for b in list(self.rows.values()) if b.booking_date == booking_date and (shift is None or b.shift == shift)]


class FakeAttendanceRepo:
    """Emulates uq_attendance_user_shift_date_status."""

    def __init__(self):
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self.rows: dict[int, AttendanceRecord] = {}

    def _insert(self, record_kwargs):
        with self._lock:
            key = (record_kwargs["user_id"], record_kwargs["shift"], record_kwargs["work_date"], record_kwargs["status"])
            if any((r.user_id, r.shift, r.work_date, r.status) == key for r in list(self.rows.values())):
                raise DuplicateKeyError("duplicate", key="uq_attendance_user_shift_date_status")
            attendance_id = next(self._ids)
            self.rows[attendance_id] = AttendanceRecord(attendance_id=attendance_id, **record_kwargs)
            return attendance_id

    def get_by_id(self, attendance_id):
        return self.rows.get(int(attendance_id))

    def list_for_user_and_date(self, user_id, work_date):
        return [r for r in list(self.rows.values()) if r.user_id == int(user_id) and r.work_date == work_date]

    def list_for_user_since(self, user_id, since):
        rows = [r for r in list(self.rows.values()) if r.user_id == int(user_id) and r.work_date >= since]
        return sorted(rows, key=lambda r: (r.work_date, r.attendance_id), reverse=True)

    def list_for_date(self, work_date):
        return [r for r in list(self.rows.values()) if r.work_date == work_date]

    def create_check_in(self, *, user_id, shift, work_date, check_in_time):
        return self._insert(
            dict(
                user_id=user_id,
                shift=shift,
                work_date=work_date,
                status=AttendanceStatus.PRESENT,
                check_in_time=check_in_time,
            )
        )

    def set_check_out(self, *, attendance_id, check_out_time):
        with self._lock:
            row = self.rows.get(int(attendance_id))
            if not row or not row.is_open:
                return False
            self.rows[row.attendance_id] = replace(row, check_out_time=check_out_time)
            return True

    def create_absent(self, *, user_id, shift, work_date, reason):
        return self._insert(
            dict(user_id=user_id, shift=shift, work_date=work_date, status=AttendanceStatus.ABSENT, reason=reason)
        )


class FakeCashPaymentsRepo:
    """Emulates uq_cash_pending_booking / uq_cash_pending_admission."""

    def __init__(self):
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self.rows: dict[int, CashPayment] = {}

    def create(self, *, user_id, amount, booking_id=None, admission_id=None):
        with self._lock:
            if booking_id is not None and self._pending("booking_id", booking_id):
                raise DuplicateKeyError("duplicate", key="uq_cash_pending_booking")
            if admission_id is not None and self._pending("admission_id", admission_id):
                raise DuplicateKeyError("duplicate", key="uq_cash_pending_admission")
            payment_id = next(self._ids)
            self.rows[payment_id] = CashPayment(
                payment_id=payment_id,
                user_id=user_id,
                amount=Decimal(amount),
                status=CashPaymentStatus.PENDING,
                booking_id=booking_id,
                admission_id=admission_id,
            )
            return payment_id

    def get_by_id(self, payment_id):
        return self.rows.get(int(payment_id))

    def _pending(self, column, value):
        return next((p for p in list(self.rows.values()) if getattr(p, column) == int(value) and p.is_pending), None)

    def find_pending_for_booking(self, booking_id):
        return self._pending("booking_id", booking_id)

    def find_pending_for_admission(self, admission_id):
        return self._pending("admission_id", admission_id)

    def decide(self, *, payment_id, status, decided_by, decided_at, note=None):
        with self._lock:
            row = self.rows.get(int(payment_id))
            if not row or not row.is_pending:
                return False
            self.rows[row.payment_id] = replace(
                row,
                status=status,
                approved_by=decided_by,
                approved_at=decided_at,
                admin_notes=note if note is not None else row.admin_notes,
            )
            return True

    def list_by_status(self, status, *, limit=200):
        return [p for p in list(self.rows.values()) if p.status == status][:limit]

    def list_for_user(self, user_id, *, limit=200):
        return [p for p in list(self.rows.values()) if p.user_id == int(user_id)][:limit]


class FakeHistoryRepo:
    def __init__(self):
        self._ids = itertools.count(1)
        self.rows: list[PaymentHistoryEntry] = []

    def create(self, *, user_id, amount, payment_mode, duration_months, payment_date, receipt_number):
        if any(r.receipt_number == receipt_number for r in self.rows):
            raise DuplicateKeyError("duplicate", key="uq_payment_history_receipt")
        entry = PaymentHistoryEntry(
            history_id=next(self._ids),
            user_id=user_id,
            amount=amount,
            payment_mode=payment_mode,
            duration_months=duration_months,
            payment_date=payment_date,
            receipt_number=receipt_number,
        )
        self.rows.append(entry)
        return entry.history_id

    def list_for_user(self, user_id, *, limit=200):
        return [r for r in reversed(self.rows) if r.user_id == int(user_id)][:limit]


class FakeNotificationsRepo:
    def __init__(self):
        self._ids = itertools.count(1)
        self.rows: dict[int, Notification] = {}
        self.fail = False

    def create(self, *, user_id, title, message, type, created_by=None):
        if self.fail:
            raise RuntimeError("notifications table unavailable")
        notification_id = next(self._ids)
        self.rows[notification_id] = Notification(
            notification_id=notification_id,
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            created_by=created_by,
        )
        return notification_id

    def list_for_user(self, user_id, *, unread_only=False, limit=50):
        return [
            n for n in list(self.rows.values()) if n.user_id == int(user_id) and (not unread_only or not n.is_read)
        ][:limit]

    def mark_read(self, *, notification_id, user_id):
        row = self.rows.get(int(notification_id))
        if not row or row.user_id != int(user_id):
            return False
        self.rows[row.notification_id] = replace(row, is_read=True)
        return True


class FakeAuditRepo:
    def __init__(self):
        self._ids = itertools.count(1)
        self.rows: list[AdminLogEntry] = []

    def create(self, *, admin_id, action, target_user_id, details):
        entry = AdminLogEntry(
            log_id=next(self._ids),
            admin_id=admin_id,
            action=action,
            target_user_id=target_user_id,
            details=details,
        )
        self.rows.append(entry)
        return entry.log_id

    def list_recent(self, *, limit=100):
        return list(reversed(self.rows))[:limit]


@pytest.fixture()
def repos():
    r = SimpleNamespace(
        users=FakeUsersRepo(),
        admissions=FakeAdmissionsRepo(),
        bookings=FakeBookingsRepo(),
        attendance=FakeAttendanceRepo(),
        cash_payments=FakeCashPaymentsRepo(),
        history=FakeHistoryRepo(),
        notifications=FakeNotificationsRepo(),
        audit=FakeAuditRepo(),
    )
    r.users.create_user(
        email="admin@library.local",
        full_name="Library Admin",
        mobile_number="9000000000",
        password_hash="unused",
        role=Role.ADMIN,
        approval_status=ApprovalStatus.APPROVED,
    )
    return r


@pytest.fixture()
def container(repos):
    return wire_services(
        users_repo=repos.users,
        admissions_repo=repos.admissions,
        bookings_repo=repos.bookings,
        attendance_repo=repos.attendance,
        cash_payments_repo=repos.cash_payments,
        payment_history_repo=repos.history,
        notifications_repo=repos.notifications,
        audit_repo=repos.audit,
    )


@pytest.fixture()
def admin_id(repos):
    return repos.users.get_by_email("admin@library.local").user_id


@pytest.fixture()
def booking_day():
    return date(2025, 1, 10)
