from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import NotificationType


@dataclass(frozen=True)
class Notification:
    notification_id: int
    user_id: int
    title: str
    message: str
    type: NotificationType
    is_read: bool = False
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AdminLogEntry:
    """Audit trail row for an admin decision."""

    log_id: int
    admin_id: int
    action: str
    target_user_id: Optional[int]
    details: dict = field(default_factory=dict)
    created_at: Optional[datetime] = None
