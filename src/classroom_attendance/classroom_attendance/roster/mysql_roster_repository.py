from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, insert_unless_duplicate, new_id
from .model import ClassStudentLink, ClassTeacherLink, Contact, SchoolClass, Student, Teacher
from .repository import ContactRepository, RosterRepository

_TEACHER_COLUMNS = "id, full_name, photo_url, contact_id, email, phone"
_STUDENT_COLUMNS = "id, full_name, photo_url, date_of_birth, guardian_name, guardian_phone"


def _to_class(r: dict) -> SchoolClass:
    return SchoolClass(class_id=str(r["id"]), name=r["class_name"], description=r.get("description"))


def _to_teacher(r: dict) -> Teacher:
    return Teacher(
        teacher_id=str(r["id"]),
        full_name=r["full_name"],
        photo_url=r.get("photo_url"),
        linked_contact_id=r.get("contact_id"),
        email=r.get("email"),
        phone=r.get("phone"),
    )


def _to_student(r: dict) -> Student:
    return Student(
        student_id=str(r["id"]),
        full_name=r["full_name"],
        photo_url=r.get("photo_url"),
        date_of_birth=r["date_of_birth"],
        guardian_name=r["guardian_name"],
        guardian_phone=r["guardian_phone"],
    )


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_classes(self) -> Sequence[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, class_name, description FROM classes ORDER BY class_name")
            return [_to_class(r) for r in fetchall(cur)]

    def get_class(self, class_id: str) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, class_name, description FROM classes WHERE id=%s", (class_id,))
            r = fetchone(cur)
            return _to_class(r) if r else None

    def list_teachers(self) -> Sequence[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TEACHER_COLUMNS} FROM teachers ORDER BY full_name")
            return [_to_teacher(r) for r in fetchall(cur)]

    def get_teacher(self, teacher_id: str) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TEACHER_COLUMNS} FROM teachers WHERE id=%s", (teacher_id,))
            r = fetchone(cur)
            return _to_teacher(r) if r else None

    def find_teacher_by_contact(self, contact_id: str) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TEACHER_COLUMNS} FROM teachers WHERE contact_id=%s", (contact_id,))
            r = fetchone(cur)
            return _to_teacher(r) if r else None

    def create_teacher(
        self,
        *,
        full_name: str,
        photo_url: Optional[str] = None,
        linked_contact_id: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> str:
        teacher_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO teachers(id, full_name, photo_url, contact_id, email, phone)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (teacher_id, full_name, photo_url, linked_contact_id, email, phone),
            )
        return teacher_id

    def list_students(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_STUDENT_COLUMNS} FROM students ORDER BY full_name")
            return [_to_student(r) for r in fetchall(cur)]

    def get_student(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_STUDENT_COLUMNS} FROM students WHERE id=%s", (student_id,))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def list_class_teacher_links(self, *, class_id: Optional[str] = None) -> Sequence[ClassTeacherLink]:
        with db_cursor(self._conn_factory) as (_, cur):
            if class_id is None:
                cur.execute("SELECT class_id, teacher_id FROM class_teachers")
            else:
                cur.execute("SELECT class_id, teacher_id FROM class_teachers WHERE class_id=%s", (class_id,))
            return [ClassTeacherLink(class_id=str(r["class_id"]), teacher_id=str(r["teacher_id"])) for r in fetchall(cur)]

    def list_class_student_links(self, *, class_id: Optional[str] = None) -> Sequence[ClassStudentLink]:
        with db_cursor(self._conn_factory) as (_, cur):
            if class_id is None:
                cur.execute("SELECT class_id, student_id FROM class_students")
            else:
                cur.execute("SELECT class_id, student_id FROM class_students WHERE class_id=%s", (class_id,))
            return [ClassStudentLink(class_id=str(r["class_id"]), student_id=str(r["student_id"])) for r in fetchall(cur)]

    def add_class_teacher(self, *, class_id: str, teacher_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # uq_class_teacher turns a concurrent duplicate into a no-op.
            return insert_unless_duplicate(
                cur,
                "INSERT INTO class_teachers(id, class_id, teacher_id) VALUES(%s,%s,%s)",
                (new_id(), class_id, teacher_id),
            )

    def remove_class_teacher(self, *, class_id: str, teacher_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM class_teachers WHERE class_id=%s AND teacher_id=%s", (class_id, teacher_id))
            return cur.rowcount > 0

    def add_class_student(self, *, class_id: str, student_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return insert_unless_duplicate(
                cur,
                "INSERT INTO class_students(id, class_id, student_id) VALUES(%s,%s,%s)",
                (new_id(), class_id, student_id),
            )

    def remove_class_student(self, *, class_id: str, student_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM class_students WHERE class_id=%s AND student_id=%s", (class_id, student_id))
            return cur.rowcount > 0


class MySQLContactRepository(ContactRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_contact(r: dict) -> Contact:
        return Contact(
            contact_id=str(r["id"]),
            name=r["name"],
            photo_url=r.get("profile_image_url"),
            email=r.get("email"),
            phone=r.get("phone"),
        )

    def get_by_id(self, contact_id: str) -> Optional[Contact]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, profile_image_url, email, phone FROM contacts WHERE id=%s", (contact_id,))
            r = fetchone(cur)
            return self._to_contact(r) if r else None

    def list_all(self) -> Sequence[Contact]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, profile_image_url, email, phone FROM contacts ORDER BY name")
            return [self._to_contact(r) for r in fetchall(cur)]
