from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import DropAction, DropZone, ItemKind
from ..roster.model import Roster

CLASS_CARD_PREFIX = "class-drop-"
TEACHER_ZONE_TOKEN = "teachers-drop-zone"
STUDENT_ZONE_TOKEN = "students-drop-zone"

ACCEPTED_KINDS: dict[DropZone, frozenset[ItemKind]] = {
    DropZone.TEACHER_ZONE: frozenset({ItemKind.TEACHER, ItemKind.CONTACT}),
    DropZone.STUDENT_ZONE: frozenset({ItemKind.STUDENT}),
    DropZone.CLASS_CARD: frozenset({ItemKind.TEACHER, ItemKind.STUDENT, ItemKind.CONTACT}),
}


@dataclass(frozen=True)
class PickedItem:
    """What is being carried: a typed identity, nothing else."""

    kind: ItemKind
    item_id: str

    @classmethod
    def parse(cls, token: str) -> Optional["PickedItem"]:
        """Parse a drag token of the form "<kind>-<id>". Unknown kinds yield None."""

        kind_s, sep, item_id = (token or "").partition("-")
        if not sep or not item_id:
            return None
        try:
            return cls(kind=ItemKind(kind_s), item_id=item_id)
        except ValueError:
            return None

    @property
    def token(self) -> str:
        return f"{self.kind.value}-{self.item_id}"


@dataclass(frozen=True)
class DropTarget:
    zone: DropZone
    class_id: str

    def accepts(self, kind: ItemKind) -> bool:
        return kind in ACCEPTED_KINDS.get(self.zone, frozenset())

    @classmethod
    def parse(cls, token: str, *, selected_class_id: Optional[str] = None) -> Optional["DropTarget"]:
        """Resolve a drop-zone token.

        Roster zones belong to the currently selected class; a class card
        carries its own class id. Anything else is not a target.
        """

        token = token or ""
        if token.startswith(CLASS_CARD_PREFIX):
            class_id = token[len(CLASS_CARD_PREFIX):]
            return cls(zone=DropZone.CLASS_CARD, class_id=class_id) if class_id else None

        if not selected_class_id:
            return None
        if token == TEACHER_ZONE_TOKEN:
            return cls(zone=DropZone.TEACHER_ZONE, class_id=selected_class_id)
        if token == STUDENT_ZONE_TOKEN:
            return cls(zone=DropZone.STUDENT_ZONE, class_id=selected_class_id)
        return None


@dataclass(frozen=True)
class DropOutcome:
    action: DropAction
    class_id: Optional[str] = None
    teacher_id: Optional[str] = None
    student_id: Optional[str] = None
    roster: Optional[Roster] = None

    @property
    def changed(self) -> bool:
        return self.action in {DropAction.ASSIGNED_TEACHER, DropAction.ASSIGNED_STUDENT, DropAction.PROMOTED_CONTACT}
