from __future__ import annotations

from src.classroom_attendance.classroom_attendance.assignments.model import DropTarget, PickedItem
from src.classroom_attendance.classroom_attendance.core.enums import DropZone, ItemKind


def test_picked_item_parses_kind_and_id():
    item = PickedItem.parse("student-00000000-0000-0000-0000-0000000000f1")

    assert item == PickedItem(kind=ItemKind.STUDENT, item_id="00000000-0000-0000-0000-0000000000f1")
    assert item.token == "student-00000000-0000-0000-0000-0000000000f1"


def test_picked_item_rejects_unknown_kind_or_missing_id():
    assert PickedItem.parse("parent-5") is None
    assert PickedItem.parse("teacher-") is None
    assert PickedItem.parse("teacher") is None
    assert PickedItem.parse("") is None


def test_roster_zone_tokens_need_a_selected_class():
    assert DropTarget.parse("students-drop-zone") is None
    assert DropTarget.parse("students-drop-zone", selected_class_id="class-1") == DropTarget(
        zone=DropZone.STUDENT_ZONE, class_id="class-1"
    )
    assert DropTarget.parse("teachers-drop-zone", selected_class_id="class-1").zone is DropZone.TEACHER_ZONE


def test_class_card_token_carries_its_own_class():
    target = DropTarget.parse("class-drop-class-2", selected_class_id="class-1")

    assert target == DropTarget(zone=DropZone.CLASS_CARD, class_id="class-2")
    assert DropTarget.parse("class-drop-") is None
    assert DropTarget.parse("somewhere-else", selected_class_id="class-1") is None


def test_accepted_kinds_per_zone():
    teacher_zone = DropTarget(zone=DropZone.TEACHER_ZONE, class_id="c")
    student_zone = DropTarget(zone=DropZone.STUDENT_ZONE, class_id="c")
    card = DropTarget(zone=DropZone.CLASS_CARD, class_id="c")

    assert teacher_zone.accepts(ItemKind.TEACHER) and teacher_zone.accepts(ItemKind.CONTACT)
    assert not teacher_zone.accepts(ItemKind.STUDENT)
    assert student_zone.accepts(ItemKind.STUDENT)
    assert not student_zone.accepts(ItemKind.CONTACT)
    assert all(card.accepts(kind) for kind in ItemKind)
