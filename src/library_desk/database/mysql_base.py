from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import DuplicateKeyError, UnexpectedError


def _duplicate_key_name(message: str) -> Optional[str]:
    # "Duplicate entry 'x-y' for key 'seat_bookings.uq_seat_booked'"
    marker = "for key '"
    if not message or marker not in message:
        return None
    key = message.split(marker, 1)[1].rstrip("'")
    return key.split(".")[-1]


@contextmanager
def db_cursor(conn_factory, *, dictionary: bool = True):
    """Yield (conn, cursor); commit on success, rollback on error.

    Unique-key violations surface as DuplicateKeyError so services can map them
    to domain conflicts; connectivity failures surface as UnexpectedError.
    """

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        raise UnexpectedError(f"Cannot connect to the database: {exc}") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as exc:
        conn.rollback()
        if exc.errno == errorcode.ER_DUP_ENTRY:
            raise DuplicateKeyError(str(exc.msg), key=_duplicate_key_name(str(exc.msg))) from exc
        raise
    except (mysql.connector.InterfaceError, mysql.connector.OperationalError) as exc:
        raise UnexpectedError(f"Database unavailable: {exc}") from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def load_json(value: Any, default: Any = None) -> Any:
    """Decode a MySQL JSON column (connector may hand back str, bytes or already-decoded values)."""

    if value is None:
        return default
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value) if value else default
    return value
