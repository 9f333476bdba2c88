from __future__ import annotations

from datetime import date, datetime

import pytest

from src.classroom_attendance.classroom_attendance.core.exceptions import ValidationError
from src.classroom_attendance.classroom_attendance.sessions.model import CheckinSession, NewCheckin


def _session(session_id, class_id, day, headcount=None, is_active=False):
    return CheckinSession(
        session_id=session_id,
        class_id=class_id,
        name=f"{class_id} - {day.isoformat()}",
        session_date=day,
        is_active=is_active,
        headcount=headcount,
    )


def _check_in(checkins_repo, session_id, n):
    entries = [NewCheckin(security_code="ABC123", guest_name=f"Guest {i}") for i in range(n)]
    checkins_repo.add(session_id=session_id, entries=entries, checked_in_at=datetime(2024, 3, 3, 9, 0))


@pytest.fixture
def seeded_sessions(sessions_repo, checkins_repo):
    for s in [
        _session("session-1", "class-1", date(2024, 3, 3), headcount=12),
        _session("session-2", "class-2", date(2024, 3, 3)),
        _session("session-3", "class-1", date(2024, 3, 10), headcount=9, is_active=True),
        _session("session-4", "class-1", date(2024, 4, 7), headcount=20),
    ]:
        sessions_repo.sessions[s.session_id] = s
    _check_in(checkins_repo, "session-1", 3)
    _check_in(checkins_repo, "session-2", 1)
    _check_in(checkins_repo, "session-4", 5)
    return sessions_repo


def test_session_stats_default_to_current_month(container, seeded_sessions):
    stats = container.reporting_engine.session_stats()

    assert (stats.start, stats.end) == (date(2024, 3, 1), date(2024, 3, 31))
    assert (stats.total_sessions, stats.total_checkins, stats.total_headcount) == (3, 4, 21)
    assert stats.average_per_session == 1
    assert len(stats.days) == 31

    first_sunday = stats.days[2]
    assert (first_sunday.day, first_sunday.sessions, first_sunday.checkins, first_sunday.headcount) == (
        date(2024, 3, 3),
        2,
        4,
        12,
    )
    assert stats.days[0].sessions == 0


def test_session_stats_custom_range(container, seeded_sessions):
    stats = container.reporting_engine.session_stats(date(2024, 3, 1), date(2024, 4, 30))

    assert (stats.total_sessions, stats.total_checkins, stats.total_headcount) == (4, 9, 41)
    assert stats.average_per_session == 2
    assert len(stats.days) == 61


def test_session_stats_empty_range_is_zero(container):
    stats = container.reporting_engine.session_stats(date(2024, 1, 1), date(2024, 1, 7))

    assert (stats.total_sessions, stats.total_checkins, stats.average_per_session) == (0, 0, 0)
    assert [d.day for d in stats.days][-1] == date(2024, 1, 7)


def test_session_stats_rejects_bad_ranges(container):
    with pytest.raises(ValidationError):
        container.reporting_engine.session_stats(date(2024, 3, 10), date(2024, 3, 1))
    with pytest.raises(ValidationError):
        container.reporting_engine.session_stats(date(2023, 1, 1), date(2024, 12, 31))


def test_session_stats_retry_transient_reads(container, seeded_sessions, sleeps):
    seeded_sessions.fail("list_in_range", times=2)

    stats = container.reporting_engine.session_stats()

    assert stats.total_sessions == 3
    assert len(sleeps) == 2
