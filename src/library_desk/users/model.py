from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ApprovalStatus, Role


@dataclass(frozen=True)
class User:
    """Domain entity: a library member or operator.

    Note: plain data object, no DB access here.
    """

    user_id: int
    email: str
    full_name: str
    mobile_number: str
    password_hash: str
    role: Role
    approval_status: ApprovalStatus
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
