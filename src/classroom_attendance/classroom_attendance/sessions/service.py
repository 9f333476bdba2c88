from __future__ import annotations

import logging
import secrets
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Iterable, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local, short_us_date, today_local
from ..common.retry import NO_RETRY, RetryPolicy
from ..common.validators import require_count, require_non_empty
from ..core.constants import SECURITY_CODE_ALPHABET, SECURITY_CODE_LENGTH
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..roster.service import RosterService
from .model import Checkin, CheckinSession, CheckinSheet, ClassView, NewCheckin, SessionState
from .repository import CheckinRepository, SessionRepository

logger = logging.getLogger(__name__)


def new_security_code() -> str:
    return "".join(secrets.choice(SECURITY_CODE_ALPHABET) for _ in range(SECURITY_CODE_LENGTH))


class SessionController:
    """Per-class check-in state machine: NoSession <-> SessionActive.

    At most one session per class is active. Ended sessions are kept, and so
    are their check-ins, but nothing can be checked in, checked out or
    counted once a session has ended.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        checkins: CheckinRepository,
        roster_service: RosterService,
        attendance: AttendanceRepository,
        *,
        retry: Optional[RetryPolicy] = None,
        clock: Callable[[], date] = today_local,
        now: Callable[[], datetime] = now_local,
        security_code: Callable[[], str] = new_security_code,
    ):
        self._sessions = sessions
        self._checkins = checkins
        self._roster = roster_service
        self._attendance = attendance
        self._retry = retry or NO_RETRY
        self._clock = clock
        self._now = now
        self._security_code = security_code

    def state(self, class_id: str) -> SessionState:
        class_id = require_non_empty(class_id, "Class id")
        active = self._retry.call(self._sessions.get_active_for_class, class_id)
        return SessionState(class_id=class_id, active_session=active)

    def start(self, class_id: str, *, today: Optional[date] = None) -> CheckinSession:
        cls = self._roster.get_class(class_id)
        today = today or self._clock()

        current = self.state(cls.class_id)
        if current.is_active:
            raise ConflictError(f"Class {cls.name} already has an active check-in session")

        name = f"{cls.name} - {short_us_date(today)}"
        # Not retried: a lost ack followed by a second insert would conflict.
        session_id = self._sessions.create(class_id=cls.class_id, name=name, session_date=today)

        logger.info("Started check-in session %s for class %s", session_id, cls.class_id)
        return CheckinSession(
            session_id=session_id,
            class_id=cls.class_id,
            name=name,
            session_date=today,
            is_active=True,
        )

    def get_session(self, session_id: str) -> CheckinSession:
        session_id = require_non_empty(session_id, "Session id")
        session = self._retry.call(self._sessions.get_by_id, session_id)
        if not session:
            raise NotFoundError(f"Session {session_id} not found")
        return session

    def _open_session(self, session_id: str) -> CheckinSession:
        session = self.get_session(session_id)
        if not session.is_active:
            raise ConflictError(f"Session {session.name} has ended")
        return session

    def end(self, session_id: str) -> CheckinSession:
        session = self.get_session(session_id)
        if not session.is_active:
            raise ConflictError(f"Session {session.session_id} has already ended")

        self._retry.call(self._sessions.deactivate, session_id=session.session_id)

        logger.info("Ended check-in session %s for class %s", session.session_id, session.class_id)
        return replace(session, is_active=False)

    def select_class(self, class_id: str, *, today: Optional[date] = None) -> ClassView:
        """Fresh view of one class; nothing from a previous selection is reused."""

        cls = self._roster.get_class(class_id)
        today = today or self._clock()

        teachers, students = self._roster.class_roster(cls.class_id)
        rows = self._retry.call(self._attendance.list_for_class_and_date, class_id=cls.class_id, on_date=today)

        return ClassView(
            school_class=cls,
            teachers=tuple(teachers),
            students=tuple(students),
            session=self.state(cls.class_id),
            on_date=today,
            attendance=tuple(rows),
        )

    def list_sessions(self, class_id: Optional[str] = None) -> Sequence[CheckinSession]:
        return self._retry.call(self._sessions.list_sessions, class_id=class_id)

    def checkin_counts(self, session_ids: Iterable[str]) -> dict[str, int]:
        """Check-ins per session; sessions nobody checked in to count 0."""

        session_ids = list(session_ids)
        counts = self._retry.call(self._checkins.count_by_session, session_ids)
        return {sid: int(counts.get(sid, 0)) for sid in session_ids}

    def checkin_sheet(self, session_id: str) -> CheckinSheet:
        session = self.get_session(session_id)
        checkins = self._retry.call(self._checkins.list_for_session, session.session_id)
        return CheckinSheet(session=session, checkins=tuple(checkins))

    def _checked_in_students(self, session_id: str) -> set[str]:
        rows = self._retry.call(self._checkins.list_for_session, session_id)
        return {c.student_id for c in rows if c.student_id}

    def _add(self, session: CheckinSession, entries: list[NewCheckin]) -> list[Checkin]:
        # Not retried: a replayed insert would duplicate guests or trip the unique key.
        return self._checkins.add(session_id=session.session_id, entries=entries, checked_in_at=self._now())

    def check_in(self, session_id: str, student_id: str, *, checked_in_by: Optional[str] = None) -> Checkin:
        session = self._open_session(session_id)
        student = self._roster.get_student(student_id)

        if student.student_id in self._checked_in_students(session.session_id):
            raise ConflictError(f"{student.full_name} is already checked in to {session.name}")

        entry = NewCheckin(
            security_code=self._security_code(),
            student_id=student.student_id,
            checked_in_by=checked_in_by,
        )
        checkin = self._add(session, [entry])[0]

        logger.info("Checked in student %s to session %s", student.student_id, session.session_id)
        return checkin

    def bulk_check_in(
        self,
        session_id: str,
        student_ids: Iterable[str],
        *,
        checked_in_by: Optional[str] = None,
    ) -> list[Checkin]:
        """Check in every listed student in one write.

        Students already checked in are skipped. Unknown students fail the
        whole call before anything is written.
        """

        wanted: list[str] = []
        for student_id in student_ids:
            student_id = require_non_empty(student_id, "Student id")
            if student_id not in wanted:
                wanted.append(student_id)
        if not wanted:
            raise ValidationError("Select at least one student")

        session = self._open_session(session_id)
        students = [self._roster.get_student(student_id) for student_id in wanted]
        already = self._checked_in_students(session.session_id)

        entries = [
            NewCheckin(security_code=self._security_code(), student_id=s.student_id, checked_in_by=checked_in_by)
            for s in students
            if s.student_id not in already
        ]
        if not entries:
            return []

        created = self._add(session, entries)
        logger.info("Checked in %d students to session %s", len(created), session.session_id)
        return created

    def check_in_guest(
        self,
        session_id: str,
        guest_name: str,
        *,
        notes: Optional[str] = None,
        checked_in_by: Optional[str] = None,
    ) -> Checkin:
        guest_name = require_non_empty(guest_name, "Guest name")
        session = self._open_session(session_id)

        entry = NewCheckin(
            security_code=self._security_code(),
            guest_name=guest_name,
            notes=(notes or "").strip() or None,
            checked_in_by=checked_in_by,
        )
        checkin = self._add(session, [entry])[0]

        logger.info("Checked in guest %r to session %s", guest_name, session.session_id)
        return checkin

    def check_out(self, checkin_id: str, *, checked_out_by: Optional[str] = None) -> Checkin:
        checkin_id = require_non_empty(checkin_id, "Check-in id")
        checkin = self._retry.call(self._checkins.get, checkin_id)
        if not checkin:
            raise NotFoundError(f"Check-in {checkin_id} not found")

        self._open_session(checkin.session_id)
        if checkin.is_checked_out:
            raise ConflictError(f"Check-in {checkin_id} is already checked out")

        checked_out_at = self._now()
        if not self._checkins.check_out(
            checkin_id=checkin_id,
            checked_out_at=checked_out_at,
            checked_out_by=checked_out_by,
        ):
            raise ConflictError(f"Check-in {checkin_id} is already checked out")

        logger.info("Checked out %s from session %s", checkin_id, checkin.session_id)
        return replace(checkin, is_checked_out=True, checked_out_at=checked_out_at, checked_out_by=checked_out_by)

    def set_headcount(self, session_id: str, headcount) -> CheckinSession:
        headcount = require_count(headcount, "Headcount")
        session = self._open_session(session_id)

        self._retry.call(self._sessions.set_headcount, session_id=session.session_id, headcount=headcount)

        logger.info("Headcount for session %s set to %d", session.session_id, headcount)
        return replace(session, headcount=headcount)
