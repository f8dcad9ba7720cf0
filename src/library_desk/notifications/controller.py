from __future__ import annotations

from flask import Flask, request

from ..common.http import admin_required, current_role, current_user_id, json_endpoint, login_required, ok, serialize
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/notifications", methods=["GET"], endpoint="list_notifications")
    @login_required
    @json_endpoint
    def list_notifications():
        unread_only = request.args.get("unread") in {"1", "true", "yes"}
        items = container.notification_service.list_for_user(current_user_id(), unread_only=unread_only)
        return ok({"notifications": serialize(list(items))})

    @app.route("/notifications/<int:notification_id>/read", methods=["POST"], endpoint="mark_notification_read")
    @login_required
    @json_endpoint
    def mark_notification_read(notification_id: int):
        container.notification_service.mark_read(user_id=current_user_id(), notification_id=notification_id)
        return ok()

    @app.route("/admin/logs", methods=["GET"], endpoint="admin_logs")
    @admin_required
    @json_endpoint
    def admin_logs():
        limit = request.args.get("limit", "100")
        if not limit.isdigit():
            raise ValidationError("limit must be a positive number")
        entries = container.audit_trail.recent(current_role=current_role(), limit=int(limit))
        return ok({"logs": serialize(list(entries))})
