from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import NotificationType
from .model import AdminLogEntry, Notification


class NotificationRepository(Protocol):
    def create(
        self,
        *,
        user_id: int,
        title: str,
        message: str,
        type: NotificationType,
        created_by: Optional[int] = None,
    ) -> int:
        raise NotImplementedError

    def list_for_user(self, user_id: int, *, unread_only: bool = False, limit: int = 50) -> Sequence[Notification]:
        raise NotImplementedError

    def mark_read(self, *, notification_id: int, user_id: int) -> bool:
        """True when the notification exists for the user, whether or not it was already read."""

        raise NotImplementedError


class AuditLogRepository(Protocol):
    def create(self, *, admin_id: int, action: str, target_user_id: Optional[int], details: dict) -> int:
        raise NotImplementedError

    def list_recent(self, *, limit: int = 100) -> Sequence[AdminLogEntry]:
        raise NotImplementedError
