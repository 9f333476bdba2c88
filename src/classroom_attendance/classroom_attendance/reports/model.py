from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import month_bounds
from ..common.validators import require_month, require_year
from ..core.constants import MONTH_NAMES
from ..core.enums import AttendanceStatus, ClassDayStatus, ReportMode
from ..roster.model import SchoolClass, Student


@dataclass(frozen=True)
class ReportWindow:
    """A calendar month or a calendar year."""

    mode: ReportMode
    year: int
    month: Optional[int] = None

    @classmethod
    def monthly(cls, year: int, month: int) -> "ReportWindow":
        return cls(mode=ReportMode.MONTHLY, year=require_year(year), month=require_month(month))

    @classmethod
    def yearly(cls, year: int) -> "ReportWindow":
        return cls(mode=ReportMode.YEARLY, year=require_year(year))

    @property
    def start(self) -> date:
        if self.mode is ReportMode.MONTHLY:
            return month_bounds(self.year, self.month)[0]
        return date(self.year, 1, 1)

    @property
    def end(self) -> date:
        if self.mode is ReportMode.MONTHLY:
            return month_bounds(self.year, self.month)[1]
        return date(self.year, 12, 31)

    @property
    def label(self) -> str:
        if self.mode is ReportMode.MONTHLY:
            return f"{MONTH_NAMES[self.month - 1]} {self.year}"
        return str(self.year)

    @property
    def period(self) -> str:
        """File-name friendly label: March_2024 or 2024."""
        return self.label.replace(" ", "_")

    @property
    def title(self) -> str:
        return f"Attendance Report - {self.label}"


@dataclass(frozen=True)
class ReportRecord:
    """An attendance row with its student and class resolved (None when gone)."""

    record: AttendanceRecord
    student: Optional[Student] = None
    school_class: Optional[SchoolClass] = None

    @property
    def student_id(self) -> str:
        return self.record.student_id

    @property
    def class_id(self) -> str:
        return self.record.class_id

    @property
    def date(self) -> date:
        return self.record.date

    @property
    def status(self) -> AttendanceStatus:
        return self.record.status


@dataclass(frozen=True)
class OverallStats:
    total_records: int
    present: int
    absent: int
    late: int
    excused: int
    attendance_rate: int
    unique_students: int
    days_with_attendance: int


@dataclass(frozen=True)
class MonthBucket:
    month: int
    name: str
    total: int
    present: int
    late: int
    absent: int
    excused: int
    attendance_rate: int


@dataclass(frozen=True)
class DayBucket:
    day: date
    total: int
    present: int
    late: int
    absent: int
    excused: int
    attendance_rate: int


@dataclass(frozen=True)
class ClassSummary:
    class_id: str
    class_name: str
    total: int
    present: int
    late: int
    absent: int
    excused: int
    attendance_rate: int
    unique_students: int


@dataclass(frozen=True)
class StudentSummary:
    student_id: str
    name: str
    class_name: str
    total_days: int
    present: int
    late: int
    absent: int
    excused: int
    attendance_rate: int


@dataclass(frozen=True)
class AttendanceReport:
    window: ReportWindow
    overall: OverallStats
    class_summary: tuple[ClassSummary, ...]
    student_summary: tuple[StudentSummary, ...]
    monthly_breakdown: tuple[MonthBucket, ...] = ()
    daily_breakdown: tuple[DayBucket, ...] = ()


@dataclass(frozen=True)
class ClassDayOverview:
    class_id: str
    class_name: str
    students: int
    marked: int
    status: ClassDayStatus


@dataclass(frozen=True)
class DailyOverview:
    on_date: date
    classes: tuple[ClassDayOverview, ...]

    @property
    def total_students(self) -> int:
        return sum(c.students for c in self.classes)

    @property
    def total_marked(self) -> int:
        return sum(c.marked for c in self.classes)

    @property
    def completed_classes(self) -> int:
        return sum(1 for c in self.classes if c.status is ClassDayStatus.DONE)


@dataclass(frozen=True)
class SessionDay:
    day: date
    sessions: int
    checkins: int
    headcount: int


@dataclass(frozen=True)
class SessionStats:
    """Kids check-in totals for a date range. Missing headcounts count as 0."""

    start: date
    end: date
    total_sessions: int
    total_checkins: int
    total_headcount: int
    average_per_session: int
    days: tuple[SessionDay, ...] = ()
