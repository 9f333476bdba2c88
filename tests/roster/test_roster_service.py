from __future__ import annotations

import pytest

from src.classroom_attendance.classroom_attendance.core.exceptions import NotFoundError, TransientStoreError
from src.classroom_attendance.classroom_attendance.roster.model import ClassStudentLink, ClassTeacherLink


def test_load_roster_returns_every_table(container):
    roster = container.roster_service.load_roster()

    assert [c.name for c in roster.classes] == ["Grades 2-3", "K-1"]
    assert len(roster.teachers) == 2
    assert len(roster.students) == 3
    assert roster.class_teacher_links == (ClassTeacherLink("class-1", "teacher-9"),)
    assert len(roster.class_student_links) == 2


def test_assign_student_twice_keeps_one_link(container, roster_repo):
    assert container.roster_service.assign_student("class-2", "student-3") is True
    assert container.roster_service.assign_student("class-2", "student-3") is False

    links = [link for link in roster_repo.student_links if link == ClassStudentLink("class-2", "student-3")]
    assert len(links) == 1


def test_assign_teacher_already_linked_is_noop(container, roster_repo):
    created = container.roster_service.assign_teacher("class-1", "teacher-9")

    assert created is False
    assert roster_repo.teacher_links.count(ClassTeacherLink("class-1", "teacher-9")) == 1
    assert roster_repo.calls.get("add_class_teacher", 0) == 0


def test_assign_missing_class_or_student_raises(container):
    with pytest.raises(NotFoundError):
        container.roster_service.assign_student("class-404", "student-1")
    with pytest.raises(NotFoundError):
        container.roster_service.assign_student("class-1", "student-404")
    with pytest.raises(NotFoundError):
        container.roster_service.assign_teacher("class-1", "teacher-404")


def test_remove_student_is_explicit_and_repeatable(container, roster_repo):
    assert container.roster_service.remove_student("class-1", "student-2") is True
    assert container.roster_service.remove_student("class-1", "student-2") is False
    assert ClassStudentLink("class-1", "student-2") not in roster_repo.student_links


def test_remove_teacher(container, roster_repo):
    assert container.roster_service.remove_teacher("class-1", "teacher-9") is True
    assert roster_repo.teacher_links == []


def test_class_roster_resolves_links(container):
    teachers, students = container.roster_service.class_roster("class-1")

    assert [t.teacher_id for t in teachers] == ["teacher-9"]
    assert [s.full_name for s in students] == ["Ann Lee", "Ben Mang"]


def test_transient_read_is_retried_with_backoff(container, roster_repo, sleeps):
    roster_repo.fail("list_classes", times=2)

    roster = container.roster_service.load_roster()

    assert len(roster.classes) == 2
    assert roster_repo.calls["list_classes"] == 3
    assert sleeps == [0.1, 0.2]


def test_transient_read_gives_up_after_three_attempts(container, roster_repo):
    roster_repo.fail("list_classes", times=3)

    with pytest.raises(TransientStoreError):
        container.roster_service.load_roster()
