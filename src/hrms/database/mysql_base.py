from __future__ import annotations

import json
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.exceptions import LockTimeoutError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
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


def is_duplicate_key(exc: IntegrityError) -> bool:
    return getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY


def as_float(value: Any) -> float:
    """MySQL DECIMAL/DOUBLE -> float (None -> 0.0)."""
    if value is None:
        return 0.0
    return float(value)


def as_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def load_json(value: Any) -> Dict[str, Any]:
    """JSON columns may come back as str, bytes or already decoded."""
    if value is None:
        return {}
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value) if value else {}
    return dict(value)


def dump_json(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, default=str)


@contextmanager
def advisory_lock(conn_factory: DatabaseConnection, name: str, *, timeout: int) -> Iterator[None]:
    """Hold a MySQL named lock (GET_LOCK) for the duration of the block.

    The lock lives on its own connection so the guarded block may use any
    number of short-lived connections.
    """

    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        try:
            cur.execute("SELECT GET_LOCK(%s, %s)", (name, int(timeout)))
            row = cur.fetchone()
            if not row or row[0] != 1:
                raise LockTimeoutError("Another request is updating this record, please retry")
            try:
                yield
            finally:
                cur.execute("SELECT RELEASE_LOCK(%s)", (name,))
                cur.fetchone()
        finally:
            cur.close()
    finally:
        conn.close()
