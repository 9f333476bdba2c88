"""Derived roster lookups.

Pure functions over the current link tables. They are recomputed on every
read; nothing here is cached.
"""

from __future__ import annotations

from typing import Iterable

from .model import ClassStudentLink, ClassTeacherLink, Roster, Student, Teacher


def teacher_ids_for_class(links: Iterable[ClassTeacherLink], class_id: str) -> list[str]:
    return [link.teacher_id for link in links if link.class_id == class_id]


def student_ids_for_class(links: Iterable[ClassStudentLink], class_id: str) -> list[str]:
    return [link.student_id for link in links if link.class_id == class_id]


def class_ids_for_teacher(links: Iterable[ClassTeacherLink], teacher_id: str) -> list[str]:
    return [link.class_id for link in links if link.teacher_id == teacher_id]


def class_ids_for_student(links: Iterable[ClassStudentLink], student_id: str) -> list[str]:
    return [link.class_id for link in links if link.student_id == student_id]


def teachers_for_class(roster: Roster, class_id: str) -> list[Teacher]:
    ids = set(teacher_ids_for_class(roster.class_teacher_links, class_id))
    return [t for t in roster.teachers if t.teacher_id in ids]


def students_for_class(roster: Roster, class_id: str) -> list[Student]:
    ids = set(student_ids_for_class(roster.class_student_links, class_id))
    return [s for s in roster.students if s.student_id in ids]


def unassigned_students(roster: Roster) -> list[Student]:
    enrolled = {link.student_id for link in roster.class_student_links}
    return [s for s in roster.students if s.student_id not in enrolled]


def roster_counts(roster: Roster) -> dict[str, int]:
    return {
        "classes": len(roster.classes),
        "teachers": len(roster.teachers),
        "students": len(roster.students),
    }
