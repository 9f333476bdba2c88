"""Example: drive the service layer directly (no Flask).

Controllers are thin; everything below is what the HTTP endpoints call.
Uses the demo rows from database/seed.sql.
"""

import importlib

from config import get_settings_module

from src.classroom_attendance.classroom_attendance.attendance.model import AttendanceMark
from src.classroom_attendance.classroom_attendance.container import build_container
from src.classroom_attendance.classroom_attendance.core.enums import AttendanceStatus
from src.classroom_attendance.classroom_attendance.reports.exporter import export_csv
from src.classroom_attendance.classroom_attendance.reports.model import ReportWindow

K1 = "00000000-0000-0000-0000-0000000000c1"
ANN = "00000000-0000-0000-0000-0000000000f1"


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    view = container.session_controller.select_class(K1)
    print(f"{view.school_class.name}: {len(view.students)} students, session active={view.session.is_active}")

    session = view.session.active_session
    if session is None:
        session = container.session_controller.start(K1)
        print("Started", session.name)

    checkins = container.session_controller.bulk_check_in(session.session_id, [s.student_id for s in view.students])
    for c in checkins:
        print(f"Checked in {c.student_id}, pickup code {c.security_code}")
    container.session_controller.set_headcount(session.session_id, len(view.students) + len(view.teachers))

    marks = container.attendance_recorder.mark_all_present([s.student_id for s in view.students])
    marks[ANN] = AttendanceMark(status=AttendanceStatus.LATE, notes="Bus delay")
    saved = container.attendance_recorder.bulk_replace(K1, view.on_date, marks)
    print(f"Saved {saved} marks")

    window = ReportWindow.monthly(view.on_date.year, view.on_date.month)
    report = container.reporting_engine.fetch_report(window)
    print(export_csv(report))

    stats = container.reporting_engine.session_stats()
    print(f"{stats.total_sessions} sessions, {stats.total_checkins} check-ins this month")


if __name__ == "__main__":
    main()
