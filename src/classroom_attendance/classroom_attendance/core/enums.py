from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance mark stored per (class, student, date)."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    EXCUSED = "Excused"


class ItemKind(str, Enum):
    """Kind of entity picked up on the assignment board."""

    TEACHER = "teacher"
    STUDENT = "student"
    CONTACT = "contact"


class DropZone(str, Enum):
    """Where a picked-up item can be dropped."""

    TEACHER_ZONE = "teacher-zone"
    STUDENT_ZONE = "student-zone"
    CLASS_CARD = "class-card"


class DropAction(str, Enum):
    ASSIGNED_TEACHER = "assigned_teacher"
    ASSIGNED_STUDENT = "assigned_student"
    PROMOTED_CONTACT = "promoted_contact"
    ALREADY_ASSIGNED = "already_assigned"
    IGNORED = "ignored"


class ReportMode(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ClassDayStatus(str, Enum):
    """Completion of a class's attendance sheet for one day."""

    DONE = "done"
    PENDING = "pending"
    NOT_STARTED = "not_started"
