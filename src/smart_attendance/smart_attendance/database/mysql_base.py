from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import DuplicateRecordError, StoreError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)``; commit on success, roll back on error.

    mysql-connector errors are re-raised as ``StoreError`` (or
    ``DuplicateRecordError`` for unique-key violations) so services never see
    driver types.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        raise StoreError(f"Cannot connect to {conn_factory.describe()}: {exc}") from exc

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
            raise DuplicateRecordError(str(exc)) from exc
        raise StoreError(str(exc)) from exc
    except mysql.connector.Error as exc:
        conn.rollback()
        raise StoreError(str(exc)) from exc
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
