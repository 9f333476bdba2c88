from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..roster.model import SchoolClass, Student, Teacher


@dataclass(frozen=True)
class CheckinSession:
    """Domain entity: a check-in window for one class. Never deleted."""

    session_id: str
    class_id: str
    name: str
    session_date: date
    is_active: bool
    headcount: Optional[int] = None


@dataclass(frozen=True)
class SessionState:
    """Per-class state: NoSession (active_session is None) or SessionActive."""

    class_id: str
    active_session: Optional[CheckinSession] = None

    @property
    def is_active(self) -> bool:
        return self.active_session is not None

    @property
    def session_id(self) -> Optional[str]:
        return self.active_session.session_id if self.active_session else None


@dataclass(frozen=True)
class ClassView:
    """Everything the check-in screen shows for the selected class."""

    school_class: SchoolClass
    teachers: tuple[Teacher, ...]
    students: tuple[Student, ...]
    session: SessionState
    on_date: date
    attendance: tuple[AttendanceRecord, ...] = ()


@dataclass(frozen=True)
class NewCheckin:
    """A check-in about to be written: a rostered student or a named guest."""

    security_code: str
    student_id: Optional[str] = None
    guest_name: Optional[str] = None
    notes: Optional[str] = None
    checked_in_by: Optional[str] = None


@dataclass(frozen=True)
class Checkin:
    checkin_id: str
    session_id: str
    security_code: str
    checked_in_at: datetime
    student_id: Optional[str] = None
    guest_name: Optional[str] = None
    notes: Optional[str] = None
    checked_in_by: Optional[str] = None
    is_checked_out: bool = False
    checked_out_at: Optional[datetime] = None
    checked_out_by: Optional[str] = None


@dataclass(frozen=True)
class CheckinSheet:
    """One session's check-ins, as the kiosk screen lists them."""

    session: CheckinSession
    checkins: tuple[Checkin, ...] = ()

    @property
    def checked_in(self) -> int:
        return len(self.checkins)

    @property
    def still_here(self) -> int:
        return sum(1 for c in self.checkins if not c.is_checked_out)

    @property
    def checked_out(self) -> int:
        return self.checked_in - self.still_here
