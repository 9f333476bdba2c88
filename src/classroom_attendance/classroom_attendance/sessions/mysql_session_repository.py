from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, new_id
from .model import CheckinSession
from .repository import SessionRepository

_COLUMNS = "id, class_id, name, session_date, is_active, headcount"


def _to_session(r: dict) -> CheckinSession:
    return CheckinSession(
        session_id=str(r["id"]),
        class_id=str(r["class_id"]),
        name=r["name"],
        session_date=r["session_date"],
        is_active=bool(r["is_active"]),
        headcount=r.get("headcount"),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: str) -> Optional[CheckinSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM checkin_sessions WHERE id=%s", (session_id,))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def get_active_for_class(self, class_id: str) -> Optional[CheckinSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM checkin_sessions WHERE class_id=%s AND is_active=1",
                (class_id,),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def create(self, *, class_id: str, name: str, session_date: date) -> str:
        session_id = new_id()
        # uq_one_active_session turns a racing second start into IntegrityError -> ConflictError.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO checkin_sessions(id, class_id, name, session_date, is_active)
                VALUES(%s,%s,%s,%s,1)
                """,
                (session_id, class_id, name, session_date),
            )
        return session_id

    def deactivate(self, *, session_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE checkin_sessions SET is_active=0 WHERE id=%s AND is_active=1", (session_id,))
            return cur.rowcount > 0

    def set_headcount(self, *, session_id: str, headcount: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE checkin_sessions SET headcount=%s WHERE id=%s", (headcount, session_id))
            return cur.rowcount > 0

    def list_sessions(self, *, class_id: Optional[str] = None) -> Sequence[CheckinSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            if class_id is None:
                cur.execute(f"SELECT {_COLUMNS} FROM checkin_sessions ORDER BY session_date DESC, created_at DESC")
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM checkin_sessions WHERE class_id=%s ORDER BY session_date DESC, created_at DESC",
                    (class_id,),
                )
            return [_to_session(r) for r in fetchall(cur)]

    def list_in_range(self, *, start: date, end: date) -> Sequence[CheckinSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM checkin_sessions
                WHERE session_date BETWEEN %s AND %s
                ORDER BY session_date, created_at
                """,
                (start, end),
            )
            return [_to_session(r) for r in fetchall(cur)]
