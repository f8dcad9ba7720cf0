from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import now_local
from ..common.http import (
    admin_required,
    current_role,
    current_user_id,
    json_body,
    json_endpoint,
    login_required,
    ok,
    serialize,
)
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/admissions", methods=["POST"], endpoint="submit_admission")
    @login_required
    @json_endpoint
    def submit_admission():
        data = json_body()
        admission_id = container.admission_service.submit(
            user_id=current_user_id(),
            name=data.get("name", ""),
            age=data.get("age"),
            contact_number=data.get("contact_number", ""),
            full_address=data.get("full_address", ""),
            email=data.get("email", ""),
            course_name=data.get("course_name", ""),
            father_name=data.get("father_name", ""),
            father_contact=data.get("father_contact", ""),
            duration=data.get("duration"),
            selected_shifts=data.get("selected_shifts") or [],
        )
        admission = container.admissions_repo.get_by_id(admission_id)
        return ok({"admission": serialize(admission)}, 201)

    @app.route("/admissions/current", methods=["GET"], endpoint="current_admission")
    @login_required
    @json_endpoint
    def current_admission():
        admission = container.admission_service.current_for_user(current_user_id())
        if not admission:
            return ok({"admission": None})
        remaining = container.admission_service.remaining_days(admission, now_local().date())
        return ok({"admission": serialize(admission), "remaining_days": remaining})

    @app.route("/admin/admissions/<int:admission_id>/extend", methods=["POST"], endpoint="admin_extend_admission")
    @admin_required
    @json_endpoint
    def admin_extend_admission(admission_id: int):
        admission = container.admission_service.extend_subscription(
            current_role=current_role(),
            admin_user_id=current_user_id(),
            admission_id=admission_id,
            months=json_body().get("months"),
        )
        return ok({"admission": serialize(admission)})
