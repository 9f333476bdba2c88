from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.classroom_attendance.classroom_attendance.attendance.model import AttendanceRecord
from src.classroom_attendance.classroom_attendance.common.retry import RetryPolicy
from src.classroom_attendance.classroom_attendance.container import build_services
from src.classroom_attendance.classroom_attendance.core.exceptions import ConflictError, TransientStoreError
from src.classroom_attendance.classroom_attendance.roster.model import (
    ClassStudentLink,
    ClassTeacherLink,
    Contact,
    SchoolClass,
    Student,
    Teacher,
)
from src.classroom_attendance.classroom_attendance.sessions.model import Checkin, CheckinSession


class FlakyMixin:
    """Raise TransientStoreError from the named methods a set number of times."""

    def _init_flaky(self):
        self.failures: dict[str, int] = {}
        self.calls: dict[str, int] = {}

    def fail(self, method: str, times: int = 1):
        self.failures[method] = times

    def _tick(self, method: str):
        self.calls[method] = self.calls.get(method, 0) + 1
        left = self.failures.get(method, 0)
        if left > 0:
            self.failures[method] = left - 1
            raise TransientStoreError(f"store unavailable during {method}")


class InMemoryRoster(FlakyMixin):
    def __init__(self, *, classes=(), teachers=(), students=(), teacher_links=(), student_links=()):
        self._init_flaky()
        self.classes = {c.class_id: c for c in classes}
        self.teachers = {t.teacher_id: t for t in teachers}
        self.students = {s.student_id: s for s in students}
        self.teacher_links: list[ClassTeacherLink] = list(teacher_links)
        self.student_links: list[ClassStudentLink] = list(student_links)
        self._next_teacher = 100

    def list_classes(self):
        self._tick("list_classes")
        return sorted(self.classes.values(), key=lambda c: c.name)

    def get_class(self, class_id: str) -> Optional[SchoolClass]:
        self._tick("get_class")
        return self.classes.get(class_id)

    def list_teachers(self):
        return sorted(self.teachers.values(), key=lambda t: t.full_name)

    def get_teacher(self, teacher_id: str) -> Optional[Teacher]:
        return self.teachers.get(teacher_id)

    def find_teacher_by_contact(self, contact_id: str) -> Optional[Teacher]:
        return next((t for t in self.teachers.values() if t.linked_contact_id == contact_id), None)

    def create_teacher(self, *, full_name, photo_url=None, linked_contact_id=None, email=None, phone=None) -> str:
        self._tick("create_teacher")
        self._next_teacher += 1
        teacher_id = f"teacher-{self._next_teacher}"
        self.teachers[teacher_id] = Teacher(
            teacher_id=teacher_id,
            full_name=full_name,
            photo_url=photo_url,
            linked_contact_id=linked_contact_id,
            email=email,
            phone=phone,
        )
        return teacher_id

    def list_students(self):
        return sorted(self.students.values(), key=lambda s: s.full_name)

    def get_student(self, student_id: str) -> Optional[Student]:
        return self.students.get(student_id)

    def list_class_teacher_links(self, *, class_id: Optional[str] = None):
        return [link for link in self.teacher_links if class_id is None or link.class_id == class_id]

    def list_class_student_links(self, *, class_id: Optional[str] = None):
        return [link for link in self.student_links if class_id is None or link.class_id == class_id]

    def add_class_teacher(self, *, class_id: str, teacher_id: str) -> bool:
        self._tick("add_class_teacher")
        link = ClassTeacherLink(class_id=class_id, teacher_id=teacher_id)
        if link in self.teacher_links:
            return False
        self.teacher_links.append(link)
        return True

    def remove_class_teacher(self, *, class_id: str, teacher_id: str) -> bool:
        link = ClassTeacherLink(class_id=class_id, teacher_id=teacher_id)
        if link not in self.teacher_links:
            return False
        self.teacher_links.remove(link)
        return True

    def add_class_student(self, *, class_id: str, student_id: str) -> bool:
        self._tick("add_class_student")
        link = ClassStudentLink(class_id=class_id, student_id=student_id)
        if link in self.student_links:
            return False
        self.student_links.append(link)
        return True

    def remove_class_student(self, *, class_id: str, student_id: str) -> bool:
        link = ClassStudentLink(class_id=class_id, student_id=student_id)
        if link not in self.student_links:
            return False
        self.student_links.remove(link)
        return True


class InMemoryContacts:
    def __init__(self, contacts=()):
        self.contacts = {c.contact_id: c for c in contacts}

    def get_by_id(self, contact_id: str) -> Optional[Contact]:
        return self.contacts.get(contact_id)

    def list_all(self):
        return sorted(self.contacts.values(), key=lambda c: c.name)


class InMemorySessions(FlakyMixin):
    def __init__(self):
        self._init_flaky()
        self.sessions: dict[str, CheckinSession] = {}
        self._next_id = 0

    def get_by_id(self, session_id: str) -> Optional[CheckinSession]:
        return self.sessions.get(session_id)

    def get_active_for_class(self, class_id: str) -> Optional[CheckinSession]:
        return next((s for s in self.sessions.values() if s.class_id == class_id and s.is_active), None)

    def create(self, *, class_id: str, name: str, session_date: date) -> str:
        self._tick("create")
        if self.get_active_for_class(class_id):
            raise ConflictError("Duplicate entry for uq_one_active_session")
        self._next_id += 1
        session_id = f"session-{self._next_id}"
        self.sessions[session_id] = CheckinSession(
            session_id=session_id,
            class_id=class_id,
            name=name,
            session_date=session_date,
            is_active=True,
        )
        return session_id

    def deactivate(self, *, session_id: str) -> bool:
        self._tick("deactivate")
        s = self.sessions.get(session_id)
        if not s or not s.is_active:
            return False
        self.sessions[session_id] = replace(s, is_active=False)
        return True

    def set_headcount(self, *, session_id: str, headcount: int) -> bool:
        self._tick("set_headcount")
        s = self.sessions.get(session_id)
        if not s:
            return False
        self.sessions[session_id] = replace(s, headcount=headcount)
        return True

    def list_sessions(self, *, class_id: Optional[str] = None):
        items = [s for s in self.sessions.values() if class_id is None or s.class_id == class_id]
        items.sort(key=lambda s: (s.session_date, int(s.session_id.split("-")[1])), reverse=True)
        return items

    def list_in_range(self, *, start: date, end: date):
        self._tick("list_in_range")
        items = [s for s in self.sessions.values() if start <= s.session_date <= end]
        items.sort(key=lambda s: (s.session_date, int(s.session_id.split("-")[1])))
        return items


class InMemoryCheckins(FlakyMixin):
    def __init__(self):
        self._init_flaky()
        self.checkins: dict[str, Checkin] = {}
        self._next_id = 0

    def get(self, checkin_id: str) -> Optional[Checkin]:
        return self.checkins.get(checkin_id)

    def list_for_session(self, session_id: str):
        return [c for c in self.checkins.values() if c.session_id == session_id]

    def add(self, *, session_id: str, entries, checked_in_at: datetime):
        self._tick("add")
        taken = {c.student_id for c in self.list_for_session(session_id) if c.student_id}
        if any(e.student_id in taken for e in entries if e.student_id):
            raise ConflictError("Duplicate entry for uq_checkin_session_student")
        created = []
        for e in entries:
            self._next_id += 1
            checkin = Checkin(
                checkin_id=f"checkin-{self._next_id}",
                session_id=session_id,
                security_code=e.security_code,
                checked_in_at=checked_in_at,
                student_id=e.student_id,
                guest_name=e.guest_name,
                notes=e.notes,
                checked_in_by=e.checked_in_by,
            )
            self.checkins[checkin.checkin_id] = checkin
            created.append(checkin)
        return created

    def check_out(self, *, checkin_id: str, checked_out_at: datetime, checked_out_by: Optional[str] = None) -> bool:
        self._tick("check_out")
        c = self.checkins.get(checkin_id)
        if not c or c.is_checked_out:
            return False
        self.checkins[checkin_id] = replace(
            c, is_checked_out=True, checked_out_at=checked_out_at, checked_out_by=checked_out_by
        )
        return True

    def count_by_session(self, session_ids):
        counts: dict[str, int] = {}
        for c in self.checkins.values():
            if c.session_id in session_ids:
                counts[c.session_id] = counts.get(c.session_id, 0) + 1
        return counts


class InMemoryAttendance(FlakyMixin):
    def __init__(self, records=()):
        self._init_flaky()
        self.rows: dict[tuple[str, str, date], AttendanceRecord] = {}
        for r in records:
            self.rows[(r.class_id, r.student_id, r.date)] = r

    def get(self, *, class_id: str, student_id: str, on_date: date) -> Optional[AttendanceRecord]:
        return self.rows.get((class_id, student_id, on_date))

    def upsert_status(self, *, class_id, student_id, on_date, status, notes=None, taken_by=None) -> None:
        self._tick("upsert_status")
        key = (class_id, student_id, on_date)
        existing = self.rows.get(key)
        if existing:
            self.rows[key] = AttendanceRecord(
                student_id=student_id,
                class_id=class_id,
                date=on_date,
                status=status,
                notes=existing.notes,
                taken_by=existing.taken_by,
            )
        else:
            self.rows[key] = AttendanceRecord(
                student_id=student_id,
                class_id=class_id,
                date=on_date,
                status=status,
                notes=notes,
                taken_by=taken_by,
            )

    def list_for_class_and_date(self, *, class_id: str, on_date: date):
        self._tick("list_for_class_and_date")
        return [r for (c, _, d), r in self.rows.items() if c == class_id and d == on_date]

    def replace_day(self, *, class_id, on_date, marks, taken_by=None) -> int:
        self._tick("replace_day")
        for key in [k for k in self.rows if k[0] == class_id and k[2] == on_date]:
            del self.rows[key]
        for student_id, mark in marks.items():
            self.rows[(class_id, student_id, on_date)] = AttendanceRecord(
                student_id=student_id,
                class_id=class_id,
                date=on_date,
                status=mark.status,
                notes=mark.notes,
                taken_by=taken_by,
            )
        return len(marks)

    def list_in_range(self, *, start, end, class_id=None, status=None):
        self._tick("list_in_range")
        items = [
            r for r in self.rows.values()
            if start <= r.date <= end
            and (class_id is None or r.class_id == class_id)
            and (status is None or r.status == status)
        ]
        items.sort(key=lambda r: (r.date, r.class_id, r.student_id), reverse=True)
        return items

    def count_marked_by_class(self, *, on_date: date):
        counts: dict[str, int] = {}
        for (class_id, _, d) in self.rows:
            if d == on_date:
                counts[class_id] = counts.get(class_id, 0) + 1
        return counts


def make_student(student_id: str, full_name: str) -> Student:
    return Student(
        student_id=student_id,
        full_name=full_name,
        date_of_birth=date(2017, 5, 1),
        guardian_name=f"Guardian of {full_name}",
        guardian_phone="555-0100",
    )


@pytest.fixture
def fixed_today():
    return date(2024, 3, 10)


@pytest.fixture
def roster_repo():
    return InMemoryRoster(
        classes=[
            SchoolClass(class_id="class-1", name="K-1"),
            SchoolClass(class_id="class-2", name="Grades 2-3"),
        ],
        teachers=[
            Teacher(teacher_id="teacher-9", full_name="Mary Sui"),
            Teacher(teacher_id="teacher-1", full_name="John Tuang"),
        ],
        students=[
            make_student("student-1", "Ann Lee"),
            make_student("student-2", "Ben Mang"),
            make_student("student-3", "cing Par"),
        ],
        teacher_links=[ClassTeacherLink(class_id="class-1", teacher_id="teacher-9")],
        student_links=[
            ClassStudentLink(class_id="class-1", student_id="student-1"),
            ClassStudentLink(class_id="class-1", student_id="student-2"),
        ],
    )


@pytest.fixture
def contacts_repo():
    return InMemoryContacts(
        [
            Contact(contact_id="contact-1", name="Grace Thang", email="grace@example.org", phone="555-0101"),
            Contact(contact_id="contact-2", name="Peter Lian", phone="555-0102"),
        ]
    )


@pytest.fixture
def sessions_repo():
    return InMemorySessions()


@pytest.fixture
def checkins_repo():
    return InMemoryCheckins()


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def retry(sleeps):
    return RetryPolicy(attempts=3, base_delay=0.1, sleep=sleeps.append)


@pytest.fixture
def container(roster_repo, contacts_repo, sessions_repo, checkins_repo, attendance_repo, retry, fixed_today):
    return build_services(
        roster_repo=roster_repo,
        contacts_repo=contacts_repo,
        sessions_repo=sessions_repo,
        checkins_repo=checkins_repo,
        attendance_repo=attendance_repo,
        retry=retry,
        clock=lambda: fixed_today,
    )


@pytest.fixture
def client(container, monkeypatch):
    from src.classroom_attendance.classroom_attendance.main import create_app

    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    app.config["TESTING"] = True
    return app.test_client()
