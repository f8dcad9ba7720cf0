import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from library_desk.core.enums import BookingStatus, CashPaymentStatus, Role, ShiftId
from library_desk.core.exceptions import (
    AlreadyBooked,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    SeatTaken,
    ValidationError,
)

ADMIN_ID = 1


@pytest.fixture()
def enrolled(repos):
    for user_id in (10, 11, 12):
        repos.admissions.add(user_id=user_id, shifts=[ShiftId.MORNING, ShiftId.NOON])


def request(container, user_id, day, seat="A12", shift="morning"):
    return container.booking_service.request_booking(
        user_id=user_id, shift=shift, seat_number=seat, booking_date=day
    )


def test_request_approve_then_seat_taken(container, repos, enrolled, booking_day):
    receipt = request(container, 10, booking_day)

    assert receipt.status == BookingStatus.PENDING
    assert repos.bookings.get_by_id(receipt.booking_id).booking_status == BookingStatus.PENDING
    payment = repos.cash_payments.get_by_id(receipt.payment_id)
    assert payment.booking_id == receipt.booking_id
    assert payment.amount == Decimal(50)
    assert payment.status == CashPaymentStatus.PENDING

    booking = container.booking_service.approve_booking(receipt.booking_id, current_role=Role.ADMIN, admin_user_id=ADMIN_ID)
    assert booking.booking_status == BookingStatus.BOOKED

    with pytest.raises(SeatTaken):
        request(container, 11, booking_day)


def test_concurrent_approvals_for_same_seat_exactly_one_wins(container, enrolled, booking_day):
    first = request(container, 10, booking_day)
    second = request(container, 11, booking_day)
    barrier = threading.Barrier(2)

    def approve(booking_id):
        barrier.wait()
        try:
            container.booking_service.approve_booking(booking_id, current_role=Role.ADMIN, admin_user_id=ADMIN_ID)
            return "booked"
        except SeatTaken:
            return "seat_taken"

    with ThreadPoolExecutor(max_workers=2) as pool:
        outcomes = list(pool.map(approve, [first.booking_id, second.booking_id]))

    assert sorted(outcomes) == ["booked", "seat_taken"]
    booked = [
        b for b in container.booking_service.list_for_date(booking_day) if b.booking_status == BookingStatus.BOOKED
    ]
    assert len(booked) == 1


def test_one_active_booking_per_user_shift_and_day(container, enrolled, booking_day):
    request(container, 10, booking_day, seat="A12")

    with pytest.raises(AlreadyBooked):
        request(container, 10, booking_day, seat="B3")

    # other shift is fine
    request(container, 10, booking_day, seat="B3", shift="noon")


def test_store_key_backs_the_per_user_rule(container, repos, enrolled, booking_day, monkeypatch):
    request(container, 10, booking_day, seat="A12")
    # a racing request that slipped past the read
    monkeypatch.setattr(repos.bookings, "find_active_for_user", lambda **kwargs: None)

    with pytest.raises(AlreadyBooked):
        request(container, 10, booking_day, seat="C7")


def test_availability_ignores_pending(container, enrolled, booking_day):
    first = request(container, 10, booking_day, seat="A1")
    request(container, 11, booking_day, seat="A2")

    assert container.booking_service.availability(ShiftId.MORNING, booking_day) == 50

    container.booking_service.approve_booking(first.booking_id, current_role=Role.ADMIN, admin_user_id=ADMIN_ID)
    assert container.booking_service.availability("morning", booking_day) == 49

    overview = {a.shift: a for a in container.booking_service.availability_overview(booking_day)}
    assert overview[ShiftId.MORNING].booked == 1
    assert overview[ShiftId.MORNING].available == 49
    assert overview[ShiftId.NOON].available == 50
    assert overview[ShiftId.NOON].price == 349


def test_reject_deletes_booking_and_rejects_payment(container, repos, enrolled, booking_day, admin_id):
    receipt = request(container, 10, booking_day)

    container.booking_service.reject_booking(receipt.booking_id, current_role=Role.ADMIN, admin_user_id=admin_id)

    assert repos.bookings.get_by_id(receipt.booking_id) is None
    assert repos.cash_payments.get_by_id(receipt.payment_id).status == CashPaymentStatus.REJECTED
    # seat and slot are free again
    request(container, 10, booking_day)


def test_admin_decisions(container, enrolled, booking_day, admin_id):
    receipt = request(container, 10, booking_day)

    with pytest.raises(AuthorizationError):
        container.booking_service.approve_booking(receipt.booking_id, current_role=Role.STUDENT, admin_user_id=10)
    with pytest.raises(NotFoundError):
        container.booking_service.approve_booking(999, current_role=Role.ADMIN, admin_user_id=ADMIN_ID)

    container.booking_service.approve_booking(receipt.booking_id, current_role=Role.ADMIN, admin_user_id=ADMIN_ID)
    with pytest.raises(ConflictError):
        container.booking_service.approve_booking(receipt.booking_id, current_role=Role.ADMIN, admin_user_id=ADMIN_ID)


def test_request_needs_paid_admission_and_valid_seat(container, repos, booking_day):
    repos.admissions.add(user_id=20, shifts=[ShiftId.MORNING], paid=False)
    repos.admissions.add(user_id=21, shifts=[ShiftId.NOON])

    with pytest.raises(ValidationError):
        request(container, 20, booking_day)
    with pytest.raises(ValidationError):
        request(container, 21, booking_day)
    with pytest.raises(ValidationError):
        request(container, 21, booking_day, seat="12A", shift="noon")


def test_failed_payment_link_rolls_back_the_request(container, repos, enrolled, booking_day, monkeypatch):
    def boom(**kwargs):
        raise RuntimeError("cash_payments unavailable")

    monkeypatch.setattr(repos.cash_payments, "create", boom)

    with pytest.raises(RuntimeError):
        request(container, 10, booking_day)
    assert repos.bookings.list_for_user(10) == []


def test_confirmed_booking_cannot_be_rejected(container, repos, enrolled, booking_day, admin_id):
    receipt = request(container, 10, booking_day)
    container.booking_service.approve_booking(receipt.booking_id, current_role=Role.ADMIN, admin_user_id=admin_id)

    with pytest.raises(ConflictError):
        container.booking_service.reject_booking(receipt.booking_id, current_role=Role.ADMIN, admin_user_id=admin_id)

    assert repos.bookings.get_by_id(receipt.booking_id).booking_status == BookingStatus.BOOKED
    with pytest.raises(SeatTaken):
        request(container, 11, booking_day)


def test_direct_approval_settles_the_booking_fee(container, repos, enrolled, booking_day, admin_id):
    receipt = request(container, 10, booking_day)

    container.booking_service.approve_booking(receipt.booking_id, current_role=Role.ADMIN, admin_user_id=admin_id)

    payment = repos.cash_payments.get_by_id(receipt.payment_id)
    assert payment.status == CashPaymentStatus.APPROVED
    assert payment.approved_by == admin_id
    assert repos.cash_payments.find_pending_for_booking(receipt.booking_id) is None
