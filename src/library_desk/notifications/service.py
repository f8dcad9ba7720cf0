from __future__ import annotations

from typing import Optional, Sequence

from ..app_logger import get_logger
from ..core.enums import NotificationType, Role
from ..core.exceptions import AuthorizationError, NotFoundError
from .model import AdminLogEntry, Notification
from .repository import AuditLogRepository, NotificationRepository

logger = get_logger("notifications")


class NotificationService:
    """User-facing notification sink.

    `notify` is fire-and-forget: a failed insert is logged and never breaks the
    workflow that triggered it.
    """

    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def notify(
        self,
        user_id: int,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        *,
        created_by: Optional[int] = None,
    ) -> Optional[int]:
        try:
            return self._notifications.create(
                user_id=int(user_id),
                title=title,
                message=message,
                type=type,
                created_by=created_by,
            )
        except Exception:
            logger.exception("Failed to notify user %s (%s)", user_id, title)
            return None

    def list_for_user(self, user_id: int, *, unread_only: bool = False) -> Sequence[Notification]:
        return self._notifications.list_for_user(int(user_id), unread_only=unread_only)

    def mark_read(self, *, user_id: int, notification_id: int) -> None:
        if not self._notifications.mark_read(notification_id=int(notification_id), user_id=int(user_id)):
            raise NotFoundError("Notification not found")


class AuditTrail:
    """Admin action log. Same contract as notify: failures are logged, not raised."""

    def __init__(self, logs: AuditLogRepository):
        self._logs = logs

    def record(self, *, admin_id: int, action: str, target_user_id: Optional[int] = None, details: Optional[dict] = None) -> None:
        try:
            self._logs.create(
                admin_id=int(admin_id),
                action=action,
                target_user_id=target_user_id,
                details=dict(details or {}),
            )
        except Exception:
            logger.exception("Failed to write audit entry %s by admin %s", action, admin_id)

    def recent(self, *, current_role: Role, limit: int = 100) -> Sequence[AdminLogEntry]:
        """Newest admin actions first, for the admin activity screen."""

        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin access required")
        return self._logs.list_recent(limit=max(1, min(int(limit), 500)))
