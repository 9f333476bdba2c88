from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Callable, Iterable, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import iter_days, month_bounds, today_local
from ..common.retry import NO_RETRY, RetryPolicy
from ..common.validators import require_status
from ..core.constants import MAX_SESSION_STATS_DAYS, MONTH_NAMES, UNKNOWN_LABEL
from ..core.enums import ClassDayStatus, ReportMode
from ..core.exceptions import ValidationError
from ..roster.lookups import student_ids_for_class
from ..roster.service import RosterService
from ..sessions.repository import CheckinRepository, SessionRepository
from .calculator import StatusCounter, per_session_average
from .model import (
    AttendanceReport,
    ClassDayOverview,
    ClassSummary,
    DailyOverview,
    DayBucket,
    MonthBucket,
    OverallStats,
    ReportRecord,
    ReportWindow,
    SessionDay,
    SessionStats,
    StudentSummary,
)

logger = logging.getLogger(__name__)


class ReportingEngine:
    """Range-scoped attendance aggregation.

    The compute_* methods are pure over the records they are given; only
    fetch_records, fetch_report, daily_overview and session_stats touch the
    store.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        roster_service: RosterService,
        *,
        sessions: SessionRepository,
        checkins: CheckinRepository,
        retry: Optional[RetryPolicy] = None,
        clock: Callable[[], date] = today_local,
    ):
        self._attendance = attendance
        self._roster = roster_service
        self._sessions = sessions
        self._checkins = checkins
        self._retry = retry or NO_RETRY
        self._clock = clock

    def fetch_records(
        self,
        window: ReportWindow,
        *,
        class_id: Optional[str] = None,
        status=None,
    ) -> list[ReportRecord]:
        status = require_status(status) if status else None
        rows = self._retry.call(
            self._attendance.list_in_range,
            start=window.start,
            end=window.end,
            class_id=class_id,
            status=status,
        )

        roster = self._roster.load_roster()
        students = {s.student_id: s for s in roster.students}
        classes = {c.class_id: c for c in roster.classes}

        return [
            ReportRecord(record=r, student=students.get(r.student_id), school_class=classes.get(r.class_id))
            for r in rows
        ]

    @staticmethod
    def compute_overall_stats(records: Sequence[ReportRecord]) -> OverallStats:
        counter = StatusCounter().extend(r.status for r in records)
        return OverallStats(
            total_records=counter.total,
            present=counter.present,
            absent=counter.absent,
            late=counter.late,
            excused=counter.excused,
            attendance_rate=counter.rate,
            unique_students=len({r.student_id for r in records}),
            days_with_attendance=len({r.date for r in records}),
        )

    @staticmethod
    def compute_monthly_breakdown(records: Iterable[ReportRecord], window: ReportWindow) -> list[MonthBucket]:
        """Exactly twelve buckets for the window's year; empty months report rate 0."""

        counters = {m: StatusCounter() for m in range(1, 13)}
        for r in records:
            if r.date.year == window.year:
                counters[r.date.month].add(r.status)

        return [
            MonthBucket(
                month=m,
                name=MONTH_NAMES[m - 1],
                total=c.total,
                present=c.present,
                late=c.late,
                absent=c.absent,
                excused=c.excused,
                attendance_rate=c.rate,
            )
            for m, c in counters.items()
        ]

    @staticmethod
    def compute_daily_breakdown(records: Iterable[ReportRecord], window: ReportWindow) -> list[DayBucket]:
        counters = {d: StatusCounter() for d in iter_days(window.start, window.end)}
        for r in records:
            if r.date in counters:
                counters[r.date].add(r.status)

        return [
            DayBucket(
                day=d,
                total=c.total,
                present=c.present,
                late=c.late,
                absent=c.absent,
                excused=c.excused,
                attendance_rate=c.rate,
            )
            for d, c in counters.items()
        ]

    @staticmethod
    def compute_class_summary(records: Iterable[ReportRecord]) -> list[ClassSummary]:
        """Per class, weakest attendance last. Records whose class is gone are skipped."""

        counters: dict[str, StatusCounter] = defaultdict(StatusCounter)
        names: dict[str, str] = {}
        students: dict[str, set[str]] = defaultdict(set)

        for r in records:
            if r.school_class is None:
                continue
            counters[r.class_id].add(r.status)
            names[r.class_id] = r.school_class.name
            students[r.class_id].add(r.student_id)

        summary = [
            ClassSummary(
                class_id=class_id,
                class_name=names[class_id],
                total=c.total,
                present=c.present,
                late=c.late,
                absent=c.absent,
                excused=c.excused,
                attendance_rate=c.rate,
                unique_students=len(students[class_id]),
            )
            for class_id, c in counters.items()
        ]
        summary.sort(key=lambda s: s.attendance_rate, reverse=True)
        return summary

    @staticmethod
    def compute_student_summary(records: Iterable[ReportRecord]) -> list[StudentSummary]:
        """Per student, alphabetical by name. Records whose student is gone are skipped.

        The class column is taken from the student's first record in input order.
        """

        counters: dict[str, StatusCounter] = defaultdict(StatusCounter)
        names: dict[str, str] = {}
        class_names: dict[str, str] = {}

        for r in records:
            if r.student is None:
                continue
            counters[r.student_id].add(r.status)
            if r.student_id not in names:
                names[r.student_id] = r.student.full_name
                class_names[r.student_id] = r.school_class.name if r.school_class else UNKNOWN_LABEL

        summary = [
            StudentSummary(
                student_id=student_id,
                name=names[student_id],
                class_name=class_names[student_id],
                total_days=c.total,
                present=c.present,
                late=c.late,
                absent=c.absent,
                excused=c.excused,
                attendance_rate=c.rate,
            )
            for student_id, c in counters.items()
        ]
        summary.sort(key=lambda s: s.name.casefold())
        return summary

    def fetch_report(self, window: ReportWindow, *, class_id: Optional[str] = None) -> AttendanceReport:
        records = self.fetch_records(window, class_id=class_id)

        monthly = ()
        daily = ()
        if window.mode is ReportMode.YEARLY:
            monthly = tuple(self.compute_monthly_breakdown(records, window))
        else:
            daily = tuple(self.compute_daily_breakdown(records, window))

        report = AttendanceReport(
            window=window,
            overall=self.compute_overall_stats(records),
            class_summary=tuple(self.compute_class_summary(records)),
            student_summary=tuple(self.compute_student_summary(records)),
            monthly_breakdown=monthly,
            daily_breakdown=daily,
        )

        logger.debug("Built %s report for %s from %d records", window.mode.value, window.period, len(records))
        return report

    def daily_overview(self, on_date: Optional[date] = None) -> DailyOverview:
        """Roster size vs. marked rows for every class on one day."""

        on_date = on_date or self._clock()
        roster = self._roster.load_roster()
        marked_by_class = self._retry.call(self._attendance.count_marked_by_class, on_date=on_date)

        rows = []
        for cls in roster.classes:
            students = len(student_ids_for_class(roster.class_student_links, cls.class_id))
            marked = int(marked_by_class.get(cls.class_id, 0))

            if students > 0 and marked >= students:
                status = ClassDayStatus.DONE
            elif marked > 0:
                status = ClassDayStatus.PENDING
            else:
                status = ClassDayStatus.NOT_STARTED

            rows.append(
                ClassDayOverview(
                    class_id=cls.class_id,
                    class_name=cls.name,
                    students=students,
                    marked=marked,
                    status=status,
                )
            )

        return DailyOverview(on_date=on_date, classes=tuple(rows))

    def session_stats(self, start: Optional[date] = None, end: Optional[date] = None) -> SessionStats:
        """Sessions, check-ins and headcount between two dates, defaulting to this month."""

        today = self._clock()
        month_start, month_end = month_bounds(today.year, today.month)
        start = start or month_start
        end = end or month_end
        if start > end:
            raise ValidationError("Start date must be on or before end date")
        if (end - start).days >= MAX_SESSION_STATS_DAYS:
            raise ValidationError(f"Session stats cover at most {MAX_SESSION_STATS_DAYS} days")

        sessions = self._retry.call(self._sessions.list_in_range, start=start, end=end)
        counts = self._retry.call(self._checkins.count_by_session, [s.session_id for s in sessions])

        per_day: dict[date, list[int]] = defaultdict(lambda: [0, 0, 0])
        for s in sessions:
            bucket = per_day[s.session_date]
            bucket[0] += 1
            bucket[1] += int(counts.get(s.session_id, 0))
            bucket[2] += s.headcount or 0

        days = tuple(
            SessionDay(day=d, sessions=per_day[d][0], checkins=per_day[d][1], headcount=per_day[d][2])
            for d in iter_days(start, end)
        )
        total_sessions = sum(d.sessions for d in days)
        total_checkins = sum(d.checkins for d in days)

        return SessionStats(
            start=start,
            end=end,
            total_sessions=total_sessions,
            total_checkins=total_checkins,
            total_headcount=sum(d.headcount for d in days),
            average_per_session=per_session_average(total_checkins, total_sessions),
            days=days,
        )
