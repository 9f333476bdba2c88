from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import today_local
from ..common.retry import NO_RETRY, RetryPolicy
from ..common.validators import require_non_empty, require_status
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..roster.service import RosterService
from .model import AttendanceMark, AttendanceRecord, AttendanceTally
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def _normalize_marks(status_map: Mapping[str, object]) -> dict[str, AttendanceMark]:
    """Accept AttendanceMark, AttendanceStatus, plain strings or {"status", "notes"} dicts."""

    marks: dict[str, AttendanceMark] = {}
    for student_id, value in status_map.items():
        student_id = require_non_empty(student_id, "Student id")
        if isinstance(value, AttendanceMark):
            marks[student_id] = value
        elif isinstance(value, Mapping):
            notes = str(value.get("notes") or "").strip()
            marks[student_id] = AttendanceMark(status=require_status(value.get("status")), notes=notes or None)
        else:
            marks[student_id] = AttendanceMark(status=require_status(value))
    return marks


class AttendanceRecorder:
    """Use case: per-day attendance marks for a class.

    set_status is a single-row upsert. bulk_replace rewrites the whole day.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        roster_service: RosterService,
        *,
        retry: Optional[RetryPolicy] = None,
        clock: Callable[[], date] = today_local,
    ):
        self._attendance = attendance
        self._roster = roster_service
        self._retry = retry or NO_RETRY
        self._clock = clock

    def set_status(
        self,
        class_id: str,
        student_id: str,
        on_date: Optional[date],
        status,
        *,
        notes: Optional[str] = None,
        taken_by: Optional[str] = None,
        current: Iterable[AttendanceRecord] = (),
    ) -> list[AttendanceRecord]:
        """Save one mark and return `current` with that student's entry replaced."""

        class_id = self._roster.get_class(class_id).class_id
        student_id = require_non_empty(student_id, "Student id")
        status = require_status(status)
        on_date = on_date or self._clock()

        self._retry.call(
            self._attendance.upsert_status,
            class_id=class_id,
            student_id=student_id,
            on_date=on_date,
            status=status,
            notes=notes,
            taken_by=taken_by,
        )

        saved = self._retry.call(self._attendance.get, class_id=class_id, student_id=student_id, on_date=on_date)
        if not saved:
            raise NotFoundError(f"Attendance for student {student_id} on {on_date.isoformat()} was not saved")

        logger.debug("Marked student %s %s in class %s on %s", student_id, status.value, class_id, on_date)

        others = [
            r for r in current
            if not (r.student_id == student_id and r.class_id == class_id and r.date == on_date)
        ]
        others.append(saved)
        return others

    def bulk_replace(
        self,
        class_id: str,
        on_date: Optional[date],
        status_map: Mapping[str, object],
        *,
        taken_by: Optional[str] = None,
    ) -> int:
        """Replace every row for (class, date) with exactly the entries of status_map."""

        class_id = require_non_empty(class_id, "Class id")
        if not status_map:
            raise ValidationError("Please mark attendance for at least one student")

        # Every entry is validated before the store is touched.
        marks = _normalize_marks(status_map)
        self._roster.get_class(class_id)
        on_date = on_date or self._clock()

        saved = self._retry.call(
            self._attendance.replace_day,
            class_id=class_id,
            on_date=on_date,
            marks=marks,
            taken_by=taken_by,
        )

        logger.info("Saved attendance for %d students in class %s on %s", saved, class_id, on_date)
        return saved

    def mark_all_present(
        self,
        roster_student_ids: Iterable[str],
        status_map: Optional[Mapping[str, AttendanceMark]] = None,
    ) -> dict[str, AttendanceMark]:
        """Local only: every roster student becomes Present, existing notes kept."""

        status_map = status_map or {}
        result: dict[str, AttendanceMark] = {}
        for student_id in roster_student_ids:
            prior = status_map.get(student_id)
            result[student_id] = AttendanceMark(
                status=AttendanceStatus.PRESENT,
                notes=prior.notes if prior else None,
            )
        return result

    def mark_class_present(
        self,
        class_id: str,
        status_map: Optional[Mapping[str, AttendanceMark]] = None,
    ) -> dict[str, AttendanceMark]:
        _, students = self._roster.class_roster(class_id)
        return self.mark_all_present([s.student_id for s in students], status_map)

    def records_for_day(self, class_id: str, on_date: Optional[date] = None) -> Sequence[AttendanceRecord]:
        class_id = require_non_empty(class_id, "Class id")
        on_date = on_date or self._clock()
        return self._retry.call(self._attendance.list_for_class_and_date, class_id=class_id, on_date=on_date)

    @staticmethod
    def tally(records: Iterable[AttendanceRecord], roster_size: int) -> AttendanceTally:
        counts = {s: 0 for s in AttendanceStatus}
        for r in records:
            counts[r.status] += 1

        marked = sum(counts.values())
        return AttendanceTally(
            present=counts[AttendanceStatus.PRESENT],
            late=counts[AttendanceStatus.LATE],
            absent=counts[AttendanceStatus.ABSENT],
            excused=counts[AttendanceStatus.EXCUSED],
            unmarked=max(int(roster_size) - marked, 0),
        )
