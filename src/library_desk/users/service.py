from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..app_logger import get_logger
from ..common.datetime_utils import now_local
from ..common.validators import require_email, require_min_length, require_mobile, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import ApprovalStatus, NotificationType, Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DuplicateKeyError,
    NotFoundError,
)
from ..notifications.service import AuditTrail, NotificationService
from .model import User
from .repository import UserRepository

logger = get_logger("users")


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    email: str
    full_name: str
    role: Role
    approval_status: ApprovalStatus

    def to_session(self) -> dict:
        data = asdict(self)
        data["role"] = self.role.value
        data["approval_status"] = self.approval_status.value
        return data


class AuthService:
    """Use cases: sign up / sign in."""

    def __init__(self, users: UserRepository):
        self._users = users

    def sign_up(self, *, email: str, password: str, full_name: str, mobile_number: str) -> int:
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        full_name = require_non_empty(full_name, "Full name")
        mobile_number = require_mobile(mobile_number)

        if self._users.get_by_email(email):
            logger.debug("Sign-up for existing account %s", email)
            raise ConflictError("An account with this email already exists")

        try:
            user_id = self._users.create_user(
                email=email,
                full_name=full_name,
                mobile_number=mobile_number,
                password_hash=generate_password_hash(password),
                role=Role.STUDENT,
                approval_status=ApprovalStatus.PENDING,
            )
        except DuplicateKeyError:
            logger.debug("Sign-up race for existing account %s", email)
            raise ConflictError("An account with this email already exists")

        logger.info("Registered student %s (user_id=%s), awaiting approval", email, user_id)
        return user_id

    def sign_in(self, *, email: str, password: str) -> SessionUser:
        email = (email or "").strip().lower()
        user = self._users.get_by_email(email) if email else None
        if not user:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder or corrupted hashes
            ok = False
        if not ok:
            raise AuthenticationError("Invalid email or password")

        if not user.is_admin:
            if user.approval_status == ApprovalStatus.PENDING:
                raise AuthenticationError("Your account is awaiting admin approval")
            if user.approval_status == ApprovalStatus.REJECTED:
                raise AuthenticationError("Your registration was rejected. Please contact the library")

        return SessionUser(
            user_id=user.user_id,
            email=user.email,
            full_name=user.full_name,
            role=user.role,
            approval_status=user.approval_status,
        )


class UserService:
    """Use cases: admin approval of registrations."""

    def __init__(self, users: UserRepository, notifications: NotificationService, audit: AuditTrail):
        self._users = users
        self._notifications = notifications
        self._audit = audit

    def list_pending(self) -> Sequence[User]:
        return self._users.list_by_approval(ApprovalStatus.PENDING)

    def approve_user(self, *, current_role: Role, admin_user_id: int, user_id: int, now: Optional[datetime] = None) -> None:
        self._decide(current_role, admin_user_id, user_id, ApprovalStatus.APPROVED, now or now_local())
        self._notifications.notify(
            user_id,
            "Account Approved",
            "Your account has been approved. You can now sign in and complete your admission.",
            NotificationType.SUCCESS,
            created_by=admin_user_id,
        )

    def reject_user(self, *, current_role: Role, admin_user_id: int, user_id: int, now: Optional[datetime] = None) -> None:
        self._decide(current_role, admin_user_id, user_id, ApprovalStatus.REJECTED, now or now_local())
        self._notifications.notify(
            user_id,
            "Account Rejected",
            "Your registration has been rejected. Please contact the library for more information.",
            NotificationType.ERROR,
            created_by=admin_user_id,
        )

    def _decide(self, current_role: Role, admin_user_id: int, user_id: int, status: ApprovalStatus, now: datetime) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin access required")

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        if user.is_admin:
            raise AuthorizationError("Admin accounts cannot be re-approved")

        if not self._users.set_approval(int(user_id), status=status, decided_by=int(admin_user_id), decided_at=now):
            raise NotFoundError("User not found")

        action = "approve_user" if status == ApprovalStatus.APPROVED else "reject_user"
        self._audit.record(
            admin_id=admin_user_id,
            action=action,
            target_user_id=int(user_id),
            details={"email": user.email, "full_name": user.full_name},
        )
        logger.info("Admin %s set user %s to %s", admin_user_id, user_id, status.value)
