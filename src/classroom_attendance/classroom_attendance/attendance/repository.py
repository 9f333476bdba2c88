from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceMark, AttendanceRecord


class AttendanceRepository(Protocol):
    def get(self, *, class_id: str, student_id: str, on_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

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
        """Insert the (class, student, date) row, or update its status only."""

        raise NotImplementedError

    def list_for_class_and_date(self, *, class_id: str, on_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def replace_day(
        self,
        *,
        class_id: str,
        on_date: date,
        marks: Mapping[str, AttendanceMark],
        taken_by: Optional[str] = None,
    ) -> int:
        """Delete every row for (class, date) then insert one row per mark, atomically.

        Returns the number of rows inserted.
        """

        raise NotImplementedError

    def list_in_range(
        self,
        *,
        start: date,
        end: date,
        class_id: Optional[str] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records with start <= date <= end, newest date first."""

        raise NotImplementedError

    def count_marked_by_class(self, *, on_date: date) -> Mapping[str, int]:
        raise NotImplementedError
