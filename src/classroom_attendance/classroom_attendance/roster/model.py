from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class SchoolClass:
    """Domain entity: a class. Created and edited by external admin flows."""

    class_id: str
    name: str
    description: Optional[str] = None


@dataclass(frozen=True)
class Teacher:
    teacher_id: str
    full_name: str
    photo_url: Optional[str] = None
    linked_contact_id: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


@dataclass(frozen=True)
class Student:
    student_id: str
    full_name: str
    date_of_birth: date
    guardian_name: str
    guardian_phone: str
    photo_url: Optional[str] = None


@dataclass(frozen=True)
class Contact:
    """Directory entry that can be promoted into a Teacher."""

    contact_id: str
    name: str
    photo_url: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


@dataclass(frozen=True)
class ClassTeacherLink:
    class_id: str
    teacher_id: str


@dataclass(frozen=True)
class ClassStudentLink:
    class_id: str
    student_id: str


@dataclass(frozen=True)
class Roster:
    """Snapshot of every roster table, as returned by load_roster()."""

    classes: tuple[SchoolClass, ...] = ()
    teachers: tuple[Teacher, ...] = ()
    students: tuple[Student, ...] = ()
    class_teacher_links: tuple[ClassTeacherLink, ...] = ()
    class_student_links: tuple[ClassStudentLink, ...] = ()

    def find_class(self, class_id: str) -> Optional[SchoolClass]:
        return next((c for c in self.classes if c.class_id == class_id), None)
