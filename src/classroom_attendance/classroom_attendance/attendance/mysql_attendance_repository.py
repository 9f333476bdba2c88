from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, new_id
from .model import AttendanceMark, AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "student_id, class_id, date, status, notes, taken_by"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        student_id=str(r["student_id"]),
        class_id=str(r["class_id"]),
        date=r["date"],
        status=AttendanceStatus(r["status"]),
        notes=r.get("notes"),
        taken_by=r.get("taken_by"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, class_id: str, student_id: str, on_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE class_id=%s AND student_id=%s AND date=%s
                """,
                (class_id, student_id, on_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def upsert_status(
        self,
        *,
        class_id: str,
        student_id: str,
        on_date: date,
        status: AttendanceStatus,
        notes: Optional[str] = None,
        taken_by: Optional[str] = None,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(id, student_id, class_id, date, status, notes, taken_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE status=VALUES(status)
                """,
                (new_id(), student_id, class_id, on_date, status.value, notes, taken_by),
            )

    def list_for_class_and_date(self, *, class_id: str, on_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE class_id=%s AND date=%s",
                (class_id, on_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def replace_day(
        self,
        *,
        class_id: str,
        on_date: date,
        marks: Mapping[str, AttendanceMark],
        taken_by: Optional[str] = None,
    ) -> int:
        rows = [
            (new_id(), student_id, class_id, on_date, mark.status.value, mark.notes, taken_by)
            for student_id, mark in marks.items()
        ]
        # One transaction: a failure part-way rolls the delete back too.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE class_id=%s AND date=%s", (class_id, on_date))
            cur.executemany(
                """
                INSERT INTO attendance_records(id, student_id, class_id, date, status, notes, taken_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                rows,
            )
        return len(rows)

    def list_in_range(
        self,
        *,
        start: date,
        end: date,
        class_id: Optional[str] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["date BETWEEN %s AND %s"]
        params: list[object] = [start, end]

        if class_id is not None:
            clauses.append("class_id=%s")
            params.append(class_id)
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY date DESC, class_id ASC, student_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count_marked_by_class(self, *, on_date: date) -> Mapping[str, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT class_id, COUNT(*) AS marked FROM attendance_records WHERE date=%s GROUP BY class_id",
                (on_date,),
            )
            return {str(r["class_id"]): int(r["marked"]) for r in fetchall(cur)}
