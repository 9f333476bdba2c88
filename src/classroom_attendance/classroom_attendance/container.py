from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from .assignments.service import AssignmentEngine
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceRecorder
from .common.datetime_utils import today_local
from .common.retry import RetryPolicy
from .core.constants import DEFAULT_RETRY_ATTEMPTS, DEFAULT_RETRY_DELAY_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .reports.service import ReportingEngine
from .roster.mysql_roster_repository import MySQLContactRepository, MySQLRosterRepository
from .roster.repository import ContactRepository, RosterRepository
from .roster.service import RosterService
from .sessions.mysql_checkin_repository import MySQLCheckinRepository
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import CheckinRepository, SessionRepository
from .sessions.service import SessionController


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    clock: Callable[[], date]

    roster_repo: RosterRepository
    contacts_repo: ContactRepository
    sessions_repo: SessionRepository
    checkins_repo: CheckinRepository
    attendance_repo: AttendanceRepository

    roster_service: RosterService
    assignment_engine: AssignmentEngine
    session_controller: SessionController
    attendance_recorder: AttendanceRecorder
    reporting_engine: ReportingEngine


def build_services(
    *,
    roster_repo: RosterRepository,
    contacts_repo: ContactRepository,
    sessions_repo: SessionRepository,
    checkins_repo: CheckinRepository,
    attendance_repo: AttendanceRepository,
    retry: Optional[RetryPolicy] = None,
    clock: Callable[[], date] = today_local,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over any repository implementations (MySQL or in-memory)."""

    roster_service = RosterService(roster_repo, retry=retry)
    assignment_engine = AssignmentEngine(roster_service, roster_repo, contacts_repo, retry=retry)
    session_controller = SessionController(
        sessions_repo, checkins_repo, roster_service, attendance_repo, retry=retry, clock=clock
    )
    attendance_recorder = AttendanceRecorder(attendance_repo, roster_service, retry=retry, clock=clock)
    reporting_engine = ReportingEngine(
        attendance_repo,
        roster_service,
        sessions=sessions_repo,
        checkins=checkins_repo,
        retry=retry,
        clock=clock,
    )

    return Container(
        conn=conn,
        clock=clock,
        roster_repo=roster_repo,
        contacts_repo=contacts_repo,
        sessions_repo=sessions_repo,
        checkins_repo=checkins_repo,
        attendance_repo=attendance_repo,
        roster_service=roster_service,
        assignment_engine=assignment_engine,
        session_controller=session_controller,
        attendance_recorder=attendance_recorder,
        reporting_engine=reporting_engine,
    )


def build_container(
    *,
    db_config: dict,
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
    retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return build_services(
        roster_repo=MySQLRosterRepository(conn),
        contacts_repo=MySQLContactRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        checkins_repo=MySQLCheckinRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        retry=RetryPolicy(attempts=int(retry_attempts), base_delay=float(retry_delay)),
        conn=conn,
    )
