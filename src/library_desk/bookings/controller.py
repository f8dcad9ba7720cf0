from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local
from ..common.http import (
    admin_required,
    current_role,
    current_user_id,
    date_arg,
    json_body,
    json_endpoint,
    login_required,
    ok,
    serialize,
)
from ..container import Container
from ..core.enums import BookingStatus


def register(app: Flask, container: Container) -> None:
    @app.route("/shifts", methods=["GET"], endpoint="list_shifts")
    def list_shifts():
        catalog = container.catalog
        plans = [
            {"shifts": sorted(s.value for s in p.shifts), "price": p.price, "popular": p.popular}
            for p in catalog.pricing_plans()
        ]
        return ok({"shifts": [catalog.to_dict(s.shift_id) for s in catalog.list_all()], "plans": plans})

    @app.route("/bookings/availability", methods=["GET"], endpoint="booking_availability")
    @login_required
    @json_endpoint
    def booking_availability():
        booking_date = date_arg(request.args.get("date"), default=now_local().date())
        overview = container.booking_service.availability_overview(booking_date)
        booked = container.booking_service.list_for_date(booking_date)
        taken = [
            {"shift": b.shift.value, "seat_number": b.seat_number}
            for b in booked
            if b.booking_status == BookingStatus.BOOKED
        ]
        return ok({"date": booking_date.isoformat(), "shifts": serialize(overview), "taken_seats": taken})

    @app.route("/bookings", methods=["POST"], endpoint="request_booking")
    @login_required
    @json_endpoint
    def request_booking():
        data = json_body()
        receipt = container.booking_service.request_booking(
            user_id=current_user_id(),
            shift=data.get("shift"),
            seat_number=data.get("seat_number", ""),
            booking_date=date_arg(data.get("date"), default=now_local().date()),
        )
        return ok(
            {
                "booking": serialize(receipt),
                "message": "Booking request submitted. Pay the booking fee at the desk for admin approval.",
            },
            201,
        )

    @app.route("/bookings/mine", methods=["GET"], endpoint="my_bookings")
    @login_required
    @json_endpoint
    def my_bookings():
        booking_date = date_arg(request.args.get("date"))
        bookings = container.booking_service.list_for_user(current_user_id(), booking_date=booking_date)
        return ok({"bookings": serialize(list(bookings))})

    @app.route("/admin/bookings", methods=["GET"], endpoint="admin_bookings")
    @admin_required
    @json_endpoint
    def admin_bookings():
        booking_date = date_arg(request.args.get("date"), default=now_local().date())
        bookings = container.booking_service.list_for_date(booking_date, shift=request.args.get("shift") or None)
        return ok({"date": booking_date.isoformat(), "bookings": serialize(list(bookings))})

    @app.route("/admin/bookings/<int:booking_id>/approve", methods=["POST"], endpoint="admin_approve_booking")
    @admin_required
    @json_endpoint
    def admin_approve_booking(booking_id: int):
        payment = container.payment_service.approve_booking_request(
            current_role=current_role(),
            admin_user_id=current_user_id(),
            booking_id=booking_id,
        )
        return ok({"payment": serialize(payment), "booking": serialize(container.booking_service.get(booking_id))})

    @app.route("/admin/bookings/<int:booking_id>/reject", methods=["POST"], endpoint="admin_reject_booking")
    @admin_required
    @json_endpoint
    def admin_reject_booking(booking_id: int):
        payment = container.payment_service.reject_booking_request(
            current_role=current_role(),
            admin_user_id=current_user_id(),
            booking_id=booking_id,
            note=json_body().get("note"),
        )
        return ok({"payment": serialize(payment)})
