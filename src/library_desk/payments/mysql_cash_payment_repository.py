from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import CashPaymentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CashPayment
from .repository import CashPaymentRepository

_COLUMNS = (
    "payment_id, user_id, booking_id, admission_id, amount, status, "
    "admin_notes, approved_by, approved_at, created_at"
)


def _opt_int(value) -> Optional[int]:
    return int(value) if value is not None else None


def _to_payment(r: dict) -> CashPayment:
    return CashPayment(
        payment_id=int(r["payment_id"]),
        user_id=int(r["user_id"]),
        booking_id=_opt_int(r.get("booking_id")),
        admission_id=_opt_int(r.get("admission_id")),
        amount=Decimal(str(r["amount"])),
        status=CashPaymentStatus(r["status"]),
        admin_notes=r.get("admin_notes"),
        approved_by=_opt_int(r.get("approved_by")),
        approved_at=r.get("approved_at"),
        created_at=r.get("created_at"),
    )


class MySQLCashPaymentRepository(CashPaymentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        user_id: int,
        amount: Decimal,
        booking_id: Optional[int] = None,
        admission_id: Optional[int] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO cash_payments(user_id, booking_id, admission_id, amount, status)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(user_id), booking_id, admission_id, amount, CashPaymentStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def get_by_id(self, payment_id: int) -> Optional[CashPayment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM cash_payments WHERE payment_id=%s", (int(payment_id),))
            r = fetchone(cur)
            return _to_payment(r) if r else None

    def _find_pending(self, column: str, value: int) -> Optional[CashPayment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM cash_payments WHERE {column}=%s AND status=%s LIMIT 1",
                (int(value), CashPaymentStatus.PENDING.value),
            )
            r = fetchone(cur)
            return _to_payment(r) if r else None

    def find_pending_for_booking(self, booking_id: int) -> Optional[CashPayment]:
        return self._find_pending("booking_id", booking_id)

    def find_pending_for_admission(self, admission_id: int) -> Optional[CashPayment]:
        return self._find_pending("admission_id", admission_id)

    def decide(
        self,
        *,
        payment_id: int,
        status: CashPaymentStatus,
        decided_by: int,
        decided_at: datetime,
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE cash_payments
                SET status=%s, approved_by=%s, approved_at=%s, admin_notes=COALESCE(%s, admin_notes)
                WHERE payment_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(decided_by),
                    decided_at,
                    note,
                    int(payment_id),
                    CashPaymentStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def list_by_status(self, status: CashPaymentStatus, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[CashPayment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM cash_payments WHERE status=%s ORDER BY created_at DESC LIMIT %s",
                (status.value, int(limit)),
            )
            return [_to_payment(r) for r in fetchall(cur)]

    def list_for_user(self, user_id: int, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[CashPayment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM cash_payments WHERE user_id=%s ORDER BY created_at DESC LIMIT %s",
                (int(user_id), int(limit)),
            )
            return [_to_payment(r) for r in fetchall(cur)]
