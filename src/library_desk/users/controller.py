from __future__ import annotations

from datetime import timedelta

from flask import Flask, session

from ..common.http import (
    admin_required,
    current_role,
    current_user_id,
    json_body,
    json_endpoint,
    login_required,
    ok,
)
from ..container import Container
from .model import User


def _user_json(user: User) -> dict:
    return {
        "user_id": user.user_id,
        "email": user.email,
        "full_name": user.full_name,
        "mobile_number": user.mobile_number,
        "role": user.role.value,
        "approval_status": user.approval_status.value,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/auth/signup", methods=["POST"], endpoint="signup")
    @json_endpoint
    def signup():
        data = json_body()
        user_id = container.auth_service.sign_up(
            email=data.get("email", ""),
            password=data.get("password", ""),
            full_name=data.get("full_name", ""),
            mobile_number=data.get("mobile_number", ""),
        )
        return ok({"user_id": user_id, "message": "Registration submitted. Please wait for admin approval."}, 201)

    @app.route("/auth/login", methods=["POST"], endpoint="login")
    @json_endpoint
    def login():
        data = json_body()
        s_user = container.auth_service.sign_in(email=data.get("email", ""), password=data.get("password", ""))

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        app.permanent_session_lifetime = timedelta(days=7)
        session.update(s_user.to_session())
        return ok({"user": s_user.to_session()})

    @app.route("/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok()

    @app.route("/auth/session", methods=["GET"], endpoint="auth_session")
    @login_required
    def auth_session():
        return ok(
            {
                "user": {
                    "user_id": current_user_id(),
                    "email": session.get("email"),
                    "full_name": session.get("full_name"),
                    "role": session.get("role"),
                    "approval_status": session.get("approval_status"),
                }
            }
        )

    @app.route("/admin/users/pending", methods=["GET"], endpoint="admin_pending_users")
    @admin_required
    @json_endpoint
    def admin_pending_users():
        users = container.user_service.list_pending()
        return ok({"users": [_user_json(u) for u in users]})

    @app.route("/admin/users/<int:user_id>/approve", methods=["POST"], endpoint="admin_approve_user")
    @admin_required
    @json_endpoint
    def admin_approve_user(user_id: int):
        container.user_service.approve_user(
            current_role=current_role(),
            admin_user_id=current_user_id(),
            user_id=user_id,
        )
        return ok({"message": "User approved"})

    @app.route("/admin/users/<int:user_id>/reject", methods=["POST"], endpoint="admin_reject_user")
    @admin_required
    @json_endpoint
    def admin_reject_user(user_id: int):
        container.user_service.reject_user(
            current_role=current_role(),
            admin_user_id=current_user_id(),
            user_id=user_id,
        )
        return ok({"message": "User rejected"})
