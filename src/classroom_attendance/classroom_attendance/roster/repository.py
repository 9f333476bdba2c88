from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ClassStudentLink, ClassTeacherLink, Contact, SchoolClass, Student, Teacher


class RosterRepository(Protocol):
    """Repository interface for classes, teachers, students and their links.

    Joins are never done here: callers cross-reference ids themselves.
    """

    def list_classes(self) -> Sequence[SchoolClass]:
        raise NotImplementedError

    def get_class(self, class_id: str) -> Optional[SchoolClass]:
        raise NotImplementedError

    def list_teachers(self) -> Sequence[Teacher]:
        raise NotImplementedError

    def get_teacher(self, teacher_id: str) -> Optional[Teacher]:
        raise NotImplementedError

    def find_teacher_by_contact(self, contact_id: str) -> Optional[Teacher]:
        raise NotImplementedError

    def create_teacher(
        self,
        *,
        full_name: str,
        photo_url: Optional[str] = None,
        linked_contact_id: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> str:
        """Insert a teacher row and return its id."""

        raise NotImplementedError

    def list_students(self) -> Sequence[Student]:
        raise NotImplementedError

    def get_student(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def list_class_teacher_links(self, *, class_id: Optional[str] = None) -> Sequence[ClassTeacherLink]:
        raise NotImplementedError

    def list_class_student_links(self, *, class_id: Optional[str] = None) -> Sequence[ClassStudentLink]:
        raise NotImplementedError

    def add_class_teacher(self, *, class_id: str, teacher_id: str) -> bool:
        """Insert the pair unless present. Returns True when a row was created."""

        raise NotImplementedError

    def remove_class_teacher(self, *, class_id: str, teacher_id: str) -> bool:
        raise NotImplementedError

    def add_class_student(self, *, class_id: str, student_id: str) -> bool:
        raise NotImplementedError

    def remove_class_student(self, *, class_id: str, student_id: str) -> bool:
        raise NotImplementedError


class ContactRepository(Protocol):
    def get_by_id(self, contact_id: str) -> Optional[Contact]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Contact]:
        raise NotImplementedError
