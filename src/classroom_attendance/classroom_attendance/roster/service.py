from __future__ import annotations

import logging
from typing import Optional

from ..common.retry import NO_RETRY, RetryPolicy
from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError
from .lookups import students_for_class, teachers_for_class
from .model import Roster, SchoolClass, Student, Teacher
from .repository import RosterRepository

logger = logging.getLogger(__name__)


class RosterService:
    """Use case: read the roster and maintain class/teacher/student links.

    assign_* calls are idempotent: an existing pair is a silent no-op.
    """

    def __init__(self, roster: RosterRepository, *, retry: Optional[RetryPolicy] = None):
        self._roster = roster
        self._retry = retry or NO_RETRY

    def load_roster(self) -> Roster:
        call = self._retry.call
        return Roster(
            classes=tuple(call(self._roster.list_classes)),
            teachers=tuple(call(self._roster.list_teachers)),
            students=tuple(call(self._roster.list_students)),
            class_teacher_links=tuple(call(self._roster.list_class_teacher_links)),
            class_student_links=tuple(call(self._roster.list_class_student_links)),
        )

    def get_class(self, class_id: str) -> SchoolClass:
        class_id = require_non_empty(class_id, "Class id")
        cls = self._retry.call(self._roster.get_class, class_id)
        if not cls:
            raise NotFoundError(f"Class {class_id} not found")
        return cls

    def get_student(self, student_id: str) -> Student:
        student_id = require_non_empty(student_id, "Student id")
        student = self._retry.call(self._roster.get_student, student_id)
        if not student:
            raise NotFoundError(f"Student {student_id} not found")
        return student

    def get_teacher(self, teacher_id: str) -> Teacher:
        teacher_id = require_non_empty(teacher_id, "Teacher id")
        teacher = self._retry.call(self._roster.get_teacher, teacher_id)
        if not teacher:
            raise NotFoundError(f"Teacher {teacher_id} not found")
        return teacher

    def class_roster(self, class_id: str) -> tuple[list[Teacher], list[Student]]:
        """Teachers and students currently linked to one class."""

        roster = self.load_roster()
        return teachers_for_class(roster, class_id), students_for_class(roster, class_id)

    def assign_teacher(self, class_id: str, teacher_id: str) -> bool:
        cls = self.get_class(class_id)
        teacher = self.get_teacher(teacher_id)

        links = self._retry.call(self._roster.list_class_teacher_links, class_id=cls.class_id)
        if any(link.teacher_id == teacher.teacher_id for link in links):
            return False

        created = self._retry.call(self._roster.add_class_teacher, class_id=cls.class_id, teacher_id=teacher.teacher_id)
        if created:
            logger.info("Assigned teacher %s to class %s", teacher.teacher_id, cls.class_id)
        return created

    def assign_student(self, class_id: str, student_id: str) -> bool:
        cls = self.get_class(class_id)
        student = self.get_student(student_id)

        links = self._retry.call(self._roster.list_class_student_links, class_id=cls.class_id)
        if any(link.student_id == student.student_id for link in links):
            return False

        created = self._retry.call(self._roster.add_class_student, class_id=cls.class_id, student_id=student.student_id)
        if created:
            logger.info("Enrolled student %s in class %s", student.student_id, cls.class_id)
        return created

    def remove_teacher(self, class_id: str, teacher_id: str) -> bool:
        class_id = require_non_empty(class_id, "Class id")
        teacher_id = require_non_empty(teacher_id, "Teacher id")
        removed = self._retry.call(self._roster.remove_class_teacher, class_id=class_id, teacher_id=teacher_id)
        if removed:
            logger.info("Removed teacher %s from class %s", teacher_id, class_id)
        return removed

    def remove_student(self, class_id: str, student_id: str) -> bool:
        class_id = require_non_empty(class_id, "Class id")
        student_id = require_non_empty(student_id, "Student id")
        removed = self._retry.call(self._roster.remove_class_student, class_id=class_id, student_id=student_id)
        if removed:
            logger.info("Removed student %s from class %s", student_id, class_id)
        return removed
