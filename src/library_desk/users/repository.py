from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ApprovalStatus, Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        email: str,
        full_name: str,
        mobile_number: str,
        password_hash: str,
        role: Role,
        approval_status: ApprovalStatus,
    ) -> int:
        """Raises DuplicateKeyError when the email is taken."""

        raise NotImplementedError

    def set_approval(
        self,
        user_id: int,
        *,
        status: ApprovalStatus,
        decided_by: int,
        decided_at: datetime,
    ) -> bool:
        raise NotImplementedError

    def list_by_approval(self, status: ApprovalStatus, *, limit: int = 200) -> Sequence[User]:
        raise NotImplementedError
