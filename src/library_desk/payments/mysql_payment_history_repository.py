from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Sequence

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import PaymentMode
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import PaymentHistoryEntry
from .repository import PaymentHistoryRepository


class MySQLPaymentHistoryRepository(PaymentHistoryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        user_id: int,
        amount: Decimal,
        payment_mode: PaymentMode,
        duration_months: int,
        payment_date: datetime,
        receipt_number: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payment_history(user_id, amount, payment_mode, duration_months, payment_date, receipt_number)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(user_id), amount, payment_mode.value, int(duration_months), payment_date, receipt_number),
            )
            return int(cur.lastrowid)

    def list_for_user(self, user_id: int, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[PaymentHistoryEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT history_id, user_id, amount, payment_mode, duration_months, payment_date, receipt_number, created_at
                FROM payment_history
                WHERE user_id=%s
                ORDER BY payment_date DESC
                LIMIT %s
                """,
                (int(user_id), int(limit)),
            )
            return [
                PaymentHistoryEntry(
                    history_id=int(r["history_id"]),
                    user_id=int(r["user_id"]),
                    amount=Decimal(str(r["amount"])),
                    payment_mode=PaymentMode(r["payment_mode"]),
                    duration_months=int(r["duration_months"]),
                    payment_date=r["payment_date"],
                    receipt_number=r["receipt_number"],
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]
