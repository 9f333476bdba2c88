from __future__ import annotations

import logging
from typing import Optional

from ..common.retry import NO_RETRY, RetryPolicy
from ..core.enums import DropAction, ItemKind
from ..core.exceptions import NotFoundError
from ..roster.model import Contact, Teacher
from ..roster.repository import ContactRepository, RosterRepository
from ..roster.service import RosterService
from .model import DropOutcome, DropTarget, PickedItem

logger = logging.getLogger(__name__)


class AssignmentEngine:
    """Resolve a picked-up item against a drop target and apply the link change.

    Unmapped (kind, zone) pairs are ignored without error. After a mutation the
    roster is re-read from the store; it is never patched locally, so a failed
    call leaves the caller on its last-known-good roster.
    """

    def __init__(
        self,
        roster_service: RosterService,
        roster: RosterRepository,
        contacts: ContactRepository,
        *,
        retry: Optional[RetryPolicy] = None,
    ):
        self._roster_service = roster_service
        self._roster = roster
        self._contacts = contacts
        self._retry = retry or NO_RETRY

    def drop(self, item: Optional[PickedItem], target: Optional[DropTarget]) -> DropOutcome:
        if item is None or target is None or not target.accepts(item.kind):
            return DropOutcome(action=DropAction.IGNORED)

        class_id = target.class_id

        if item.kind == ItemKind.STUDENT:
            created = self._roster_service.assign_student(class_id, item.item_id)
            action = DropAction.ASSIGNED_STUDENT if created else DropAction.ALREADY_ASSIGNED
            return DropOutcome(
                action=action,
                class_id=class_id,
                student_id=item.item_id,
                roster=self._roster_service.load_roster(),
            )

        promoted = False
        if item.kind == ItemKind.CONTACT:
            teacher, promoted = self.teacher_for_contact(item.item_id)
            teacher_id = teacher.teacher_id
        else:
            teacher_id = item.item_id

        created = self._roster_service.assign_teacher(class_id, teacher_id)
        if promoted:
            action = DropAction.PROMOTED_CONTACT
        elif created:
            action = DropAction.ASSIGNED_TEACHER
        else:
            action = DropAction.ALREADY_ASSIGNED

        return DropOutcome(
            action=action,
            class_id=class_id,
            teacher_id=teacher_id,
            roster=self._roster_service.load_roster(),
        )

    def drop_tokens(self, item_token: str, target_token: str, *, selected_class_id: Optional[str] = None) -> DropOutcome:
        return self.drop(
            PickedItem.parse(item_token),
            DropTarget.parse(target_token, selected_class_id=selected_class_id),
        )

    def available_contacts(self) -> list[Contact]:
        """Directory contacts not yet linked to any teacher; these can be dragged onto a class."""

        linked = {t.linked_contact_id for t in self._retry.call(self._roster.list_teachers) if t.linked_contact_id}
        return [c for c in self._retry.call(self._contacts.list_all) if c.contact_id not in linked]

    def teacher_for_contact(self, contact_id: str) -> tuple[Teacher, bool]:
        """Return the teacher linked to a contact, creating it on first use.

        The flag is True when a new Teacher row was materialized.
        """

        contact = self._retry.call(self._contacts.get_by_id, contact_id)
        if not contact:
            raise NotFoundError(f"Contact {contact_id} not found")

        existing = self._retry.call(self._roster.find_teacher_by_contact, contact.contact_id)
        if existing:
            return existing, False

        teacher_id = self._roster.create_teacher(
            full_name=contact.name,
            photo_url=contact.photo_url,
            linked_contact_id=contact.contact_id,
            email=contact.email,
            phone=contact.phone,
        )
        logger.info("Promoted contact %s to teacher %s", contact.contact_id, teacher_id)
        return (
            Teacher(
                teacher_id=teacher_id,
                full_name=contact.name,
                photo_url=contact.photo_url,
                linked_contact_id=contact.contact_id,
                email=contact.email,
                phone=contact.phone,
            ),
            True,
        )
