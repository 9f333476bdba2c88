from __future__ import annotations

from datetime import date, datetime
from typing import Mapping, Optional, Protocol, Sequence

from .model import Checkin, CheckinSession, NewCheckin


class SessionRepository(Protocol):
    def get_by_id(self, session_id: str) -> Optional[CheckinSession]:
        raise NotImplementedError

    def get_active_for_class(self, class_id: str) -> Optional[CheckinSession]:
        raise NotImplementedError

    def create(self, *, class_id: str, name: str, session_date: date) -> str:
        """Insert an active session and return its id.

        Must raise ConflictError if the class already has an active session.
        """

        raise NotImplementedError

    def deactivate(self, *, session_id: str) -> bool:
        raise NotImplementedError

    def set_headcount(self, *, session_id: str, headcount: int) -> bool:
        raise NotImplementedError

    def list_sessions(self, *, class_id: Optional[str] = None) -> Sequence[CheckinSession]:
        """Newest first."""

        raise NotImplementedError

    def list_in_range(self, *, start: date, end: date) -> Sequence[CheckinSession]:
        """Sessions whose session_date falls in [start, end], oldest first."""

        raise NotImplementedError


class CheckinRepository(Protocol):
    def get(self, checkin_id: str) -> Optional[Checkin]:
        raise NotImplementedError

    def list_for_session(self, session_id: str) -> Sequence[Checkin]:
        """Oldest check-in first."""

        raise NotImplementedError

    def add(self, *, session_id: str, entries: Sequence[NewCheckin], checked_in_at: datetime) -> list[Checkin]:
        """Insert every entry in one transaction.

        Must raise ConflictError if a student is already checked in to the session.
        """

        raise NotImplementedError

    def check_out(self, *, checkin_id: str, checked_out_at: datetime, checked_out_by: Optional[str] = None) -> bool:
        """False when the check-in was already checked out."""

        raise NotImplementedError

    def count_by_session(self, session_ids: Sequence[str]) -> Mapping[str, int]:
        raise NotImplementedError
