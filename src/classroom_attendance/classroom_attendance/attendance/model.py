from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's mark for one class on one date."""

    student_id: str
    class_id: str
    date: date
    status: AttendanceStatus
    notes: Optional[str] = None
    taken_by: Optional[str] = None


@dataclass(frozen=True)
class AttendanceMark:
    """A working-sheet entry before it is saved."""

    status: AttendanceStatus
    notes: Optional[str] = None


@dataclass(frozen=True)
class AttendanceTally:
    present: int = 0
    late: int = 0
    absent: int = 0
    excused: int = 0
    unmarked: int = 0

    @property
    def marked(self) -> int:
        return self.present + self.late + self.absent + self.excused
