from __future__ import annotations

import json
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, load_json
from .model import AdminLogEntry
from .repository import AuditLogRepository


class MySQLAuditLogRepository(AuditLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, admin_id: int, action: str, target_user_id: Optional[int], details: dict) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO admin_logs(admin_id, action, target_user_id, details)
                VALUES(%s,%s,%s,%s)
                """,
                (int(admin_id), action, target_user_id, json.dumps(details, default=str)),
            )
            return int(cur.lastrowid)

    def list_recent(self, *, limit: int = 100) -> Sequence[AdminLogEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT log_id, admin_id, action, target_user_id, details, created_at
                FROM admin_logs
                ORDER BY created_at DESC
                LIMIT %s
                """,
                (int(limit),),
            )
            return [
                AdminLogEntry(
                    log_id=int(r["log_id"]),
                    admin_id=int(r["admin_id"]),
                    action=r["action"],
                    target_user_id=r.get("target_user_id"),
                    details=load_json(r.get("details"), {}),
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]
