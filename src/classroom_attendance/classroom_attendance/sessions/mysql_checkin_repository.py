from __future__ import annotations

from datetime import datetime
from typing import Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, new_id
from .model import Checkin, NewCheckin
from .repository import CheckinRepository

_COLUMNS = (
    "id, session_id, student_id, guest_name, security_code, notes, checked_in_by, "
    "checkin_time, is_checked_out, checkout_time, checked_out_by"
)


def _to_checkin(r: dict) -> Checkin:
    return Checkin(
        checkin_id=str(r["id"]),
        session_id=str(r["session_id"]),
        security_code=r["security_code"],
        checked_in_at=r["checkin_time"],
        student_id=r.get("student_id"),
        guest_name=r.get("guest_name"),
        notes=r.get("notes"),
        checked_in_by=r.get("checked_in_by"),
        is_checked_out=bool(r["is_checked_out"]),
        checked_out_at=r.get("checkout_time"),
        checked_out_by=r.get("checked_out_by"),
    )


class MySQLCheckinRepository(CheckinRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, checkin_id: str) -> Optional[Checkin]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM checkins WHERE id=%s", (checkin_id,))
            r = fetchone(cur)
            return _to_checkin(r) if r else None

    def list_for_session(self, session_id: str) -> Sequence[Checkin]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM checkins WHERE session_id=%s ORDER BY checkin_time, created_at",
                (session_id,),
            )
            return [_to_checkin(r) for r in fetchall(cur)]

    def add(self, *, session_id: str, entries: Sequence[NewCheckin], checked_in_at: datetime) -> list[Checkin]:
        created = [
            Checkin(
                checkin_id=new_id(),
                session_id=session_id,
                security_code=e.security_code,
                checked_in_at=checked_in_at,
                student_id=e.student_id,
                guest_name=e.guest_name,
                notes=e.notes,
                checked_in_by=e.checked_in_by,
            )
            for e in entries
        ]
        # uq_checkin_session_student rejects the whole batch if any student is already in.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO checkins(
                    id, session_id, student_id, guest_name, security_code, notes, checked_in_by, checkin_time
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                [
                    (
                        c.checkin_id,
                        c.session_id,
                        c.student_id,
                        c.guest_name,
                        c.security_code,
                        c.notes,
                        c.checked_in_by,
                        c.checked_in_at,
                    )
                    for c in created
                ],
            )
        return created

    def check_out(self, *, checkin_id: str, checked_out_at: datetime, checked_out_by: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE checkins
                SET is_checked_out=1, checkout_time=%s, checked_out_by=%s
                WHERE id=%s AND is_checked_out=0
                """,
                (checked_out_at, checked_out_by, checkin_id),
            )
            return cur.rowcount > 0

    def count_by_session(self, session_ids: Sequence[str]) -> Mapping[str, int]:
        if not session_ids:
            return {}
        placeholders = ",".join(["%s"] * len(session_ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT session_id, COUNT(*) AS n FROM checkins WHERE session_id IN ({placeholders}) GROUP BY session_id",
                tuple(session_ids),
            )
            return {str(r["session_id"]): int(r["n"]) for r in fetchall(cur)}
