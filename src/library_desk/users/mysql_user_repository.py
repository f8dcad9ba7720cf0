from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ApprovalStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = """
    user_id, email, full_name, mobile_number, password_hash,
    role, approval_status, approved_by, approved_at, created_at
"""


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        email=row["email"],
        full_name=row["full_name"],
        mobile_number=row["mobile_number"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        approval_status=ApprovalStatus(row["approval_status"]),
        approved_by=row.get("approved_by"),
        approved_at=row.get("approved_at"),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(email, full_name, mobile_number, password_hash, role, approval_status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (email, full_name, mobile_number, password_hash, role.value, approval_status.value),
            )
            return int(cur.lastrowid)

    def set_approval(
        self,
        user_id: int,
        *,
        status: ApprovalStatus,
        decided_by: int,
        decided_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET approval_status=%s, approved_by=%s, approved_at=%s
                WHERE user_id=%s
                """,
                (status.value, int(decided_by), decided_at, int(user_id)),
            )
            return cur.rowcount > 0

    def list_by_approval(self, status: ApprovalStatus, *, limit: int = 200) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM users
                WHERE approval_status=%s AND role=%s
                ORDER BY created_at ASC
                LIMIT %s
                """,
                (status.value, Role.STUDENT.value, int(limit)),
            )
            return [_to_user(r) for r in fetchall(cur)]
