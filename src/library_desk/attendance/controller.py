from __future__ import annotations

from flask import Flask, request

from ..common.http import current_user_id, json_body, json_endpoint, login_required, ok, serialize
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/attendance/check-in", methods=["POST"], endpoint="check_in")
    @login_required
    @json_endpoint
    def check_in():
        shift = json_body().get("shift")
        attendance_id = container.attendance_service.check_in(user_id=current_user_id(), shift=shift)
        return ok({"attendance_id": attendance_id, "message": f"Checked in successfully for {shift} shift!"}, 201)

    @app.route("/attendance/<int:attendance_id>/check-out", methods=["POST"], endpoint="check_out")
    @login_required
    @json_endpoint
    def check_out(attendance_id: int):
        container.attendance_service.check_out(
            attendance_id=attendance_id,
            shift=json_body().get("shift"),
            user_id=current_user_id(),
        )
        return ok({"message": "Checked out successfully"})

    @app.route("/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    @json_endpoint
    def attendance_today():
        views = container.attendance_service.today_status(current_user_id())
        return ok({"shifts": serialize(views)})

    @app.route("/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    @json_endpoint
    def attendance_history():
        days = request.args.get("days", default=7, type=int)
        rows = container.attendance_service.history(current_user_id(), days=max(1, min(days, 90)))
        return ok({"records": serialize(list(rows))})
