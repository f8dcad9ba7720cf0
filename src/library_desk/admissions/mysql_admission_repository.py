from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import PaymentStatus, ShiftId
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json
from .model import Admission, NewAdmission
from .repository import AdmissionRepository

_COLUMNS = """
    admission_id, user_id, name, age, contact_number, full_address, email,
    course_name, father_name, father_contact, duration, selected_shifts,
    registration_fee, shift_fee, total_amount, payment_status,
    payment_date, start_date, end_date, created_at
"""


def _to_admission(r: dict) -> Admission:
    return Admission(
        admission_id=int(r["admission_id"]),
        user_id=int(r["user_id"]),
        name=r["name"],
        age=int(r["age"]),
        contact_number=r["contact_number"],
        full_address=r["full_address"],
        email=r["email"],
        course_name=r["course_name"],
        father_name=r["father_name"],
        father_contact=r["father_contact"],
        duration=int(r["duration"]),
        selected_shifts=tuple(ShiftId(s) for s in load_json(r["selected_shifts"], [])),
        registration_fee=Decimal(r["registration_fee"]),
        shift_fee=Decimal(r["shift_fee"]),
        total_amount=Decimal(r["total_amount"]),
        payment_status=PaymentStatus(r["payment_status"]),
        payment_date=r.get("payment_date"),
        start_date=r.get("start_date"),
        end_date=r.get("end_date"),
        created_at=r.get("created_at"),
    )


class MySQLAdmissionRepository(AdmissionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, admission: NewAdmission) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO admissions(
                    user_id, name, age, contact_number, full_address, email, course_name,
                    father_name, father_contact, duration, selected_shifts,
                    registration_fee, shift_fee, total_amount, payment_status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(admission.user_id),
                    admission.name,
                    int(admission.age),
                    admission.contact_number,
                    admission.full_address,
                    admission.email,
                    admission.course_name,
                    admission.father_name,
                    admission.father_contact,
                    int(admission.duration),
                    json.dumps([s.value for s in admission.selected_shifts]),
                    admission.registration_fee,
                    admission.shift_fee,
                    admission.total_amount,
                    PaymentStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, admission_id: int) -> Optional[Admission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM admissions WHERE admission_id=%s", (int(admission_id),))
            r = fetchone(cur)
            return _to_admission(r) if r else None

    def get_latest_for_user(self, user_id: int) -> Optional[Admission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM admissions
                WHERE user_id=%s
                ORDER BY created_at DESC, admission_id DESC
                LIMIT 1
                """,
                (int(user_id),),
            )
            r = fetchone(cur)
            return _to_admission(r) if r else None

    def list_by_payment_status(self, status: PaymentStatus) -> Sequence[Admission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM admissions WHERE payment_status=%s ORDER BY admission_id",
                (status.value,),
            )
            return [_to_admission(r) for r in fetchall(cur)]

    def mark_paid(self, *, admission_id: int, paid_at: datetime, start_date: datetime, end_date: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE admissions
                SET payment_status=%s, payment_date=%s, start_date=%s, end_date=%s
                WHERE admission_id=%s AND payment_status=%s
                """,
                (PaymentStatus.PAID.value, paid_at, start_date, end_date, int(admission_id), PaymentStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def set_payment_status(self, *, admission_id: int, status: PaymentStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE admissions SET payment_status=%s WHERE admission_id=%s",
                (status.value, int(admission_id)),
            )
            # MySQL reports 0 affected rows when the value is unchanged; existence is what matters here
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM admissions WHERE admission_id=%s", (int(admission_id),))
            return fetchone(cur) is not None

    def set_end_date(self, *, admission_id: int, end_date: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE admissions SET end_date=%s WHERE admission_id=%s",
                (end_date, int(admission_id)),
            )
            return cur.rowcount > 0
