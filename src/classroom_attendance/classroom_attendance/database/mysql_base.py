from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConflictError, TransientStoreError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

# Driver errors that mean "try again later" rather than "your request is wrong".
TRANSIENT_ERRORS = (mysql.connector.InterfaceError, mysql.connector.OperationalError)


def new_id() -> str:
    return str(uuid.uuid4())


def _rollback_quietly(conn) -> None:
    try:
        conn.rollback()
    except mysql.connector.Error as exc:
        logger.warning("Rollback failed on a broken connection: %s", exc)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (conn, cursor) inside one transaction.

    Commits on success, rolls back on any error. Driver errors are mapped onto
    the domain taxonomy: unique-key violations become ConflictError and
    connectivity problems become TransientStoreError.
    """

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        raise TransientStoreError(f"Database unavailable: {exc}") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as exc:
        _rollback_quietly(conn)
        raise ConflictError(str(exc)) from exc
    except TRANSIENT_ERRORS as exc:
        _rollback_quietly(conn)
        raise TransientStoreError(str(exc)) from exc
    except Exception:
        _rollback_quietly(conn)
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def is_duplicate_key(exc: mysql.connector.Error) -> bool:
    return exc.errno == errorcode.ER_DUP_ENTRY


def insert_unless_duplicate(cur, sql: str, params: tuple) -> bool:
    """Execute an INSERT and report whether a row was added.

    Only a unique-key clash is a no-op. Foreign-key and other integrity
    failures propagate, and ``db_cursor`` maps them to ConflictError.
    """

    try:
        cur.execute(sql, params)
    except mysql.connector.IntegrityError as exc:
        if not is_duplicate_key(exc):
            raise
        return False
    return True
