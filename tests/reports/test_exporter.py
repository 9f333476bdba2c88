from __future__ import annotations

from datetime import date

from src.classroom_attendance.classroom_attendance.attendance.model import AttendanceRecord
from src.classroom_attendance.classroom_attendance.core.enums import AttendanceStatus
from src.classroom_attendance.classroom_attendance.reports.exporter import (
    export_csv,
    export_records_csv,
    report_filename,
)
from src.classroom_attendance.classroom_attendance.reports.model import (
    AttendanceReport,
    OverallStats,
    ReportRecord,
    ReportWindow,
    StudentSummary,
)
from src.classroom_attendance.classroom_attendance.roster.model import SchoolClass
from tests.conftest import make_student


def _overall(**overrides) -> OverallStats:
    values = dict(
        total_records=4,
        present=3,
        absent=1,
        late=0,
        excused=0,
        attendance_rate=75,
        unique_students=1,
        days_with_attendance=4,
    )
    values.update(overrides)
    return OverallStats(**values)


def _ann(**overrides) -> StudentSummary:
    values = dict(
        student_id="s1",
        name="Ann Lee",
        class_name="K-1",
        total_days=4,
        present=3,
        late=0,
        absent=1,
        excused=0,
        attendance_rate=75,
    )
    values.update(overrides)
    return StudentSummary(**values)


def test_export_csv_layout():
    text = export_csv([_ann()], _overall(), ReportWindow.monthly(2024, 3))

    assert text.splitlines() == [
        "Attendance Report - March 2024",
        "",
        "Overall Attendance Rate: 75%",
        "Total Records: 4",
        "Unique Students: 1",
        "",
        "Student Name,Class,Total Days,Present,Late,Absent,Attendance Rate",
        "Ann Lee,K-1,4,3,0,1,75%",
    ]


def test_export_csv_quotes_delimiters():
    text = export_csv([_ann(name="Lee, Ann", class_name='K "one"')], _overall(), ReportWindow.yearly(2024))

    assert text.splitlines()[-1] == '"Lee, Ann","K ""one""",4,3,0,1,75%'
    assert text.splitlines()[0] == "Attendance Report - 2024"


def test_export_csv_accepts_full_report():
    window = ReportWindow.yearly(2024)
    report = AttendanceReport(window=window, overall=_overall(), class_summary=(), student_summary=(_ann(),))

    assert export_csv(report) == export_csv([_ann()], _overall(), window)


def test_report_filename():
    assert report_filename(ReportWindow.monthly(2024, 3)) == "attendance-report-March_2024.csv"
    assert report_filename(ReportWindow.yearly(2024)) == "attendance-report-2024.csv"


def test_export_records_csv_marks_unknown_references():
    day = date(2024, 3, 10)
    records = [
        ReportRecord(
            record=AttendanceRecord("s1", "c1", day, AttendanceStatus.PRESENT),
            student=make_student("s1", "Ann Lee"),
            school_class=SchoolClass("c1", "K-1"),
        ),
        ReportRecord(record=AttendanceRecord("s9", "c9", day, AttendanceStatus.LATE)),
    ]

    assert export_records_csv(records).splitlines() == [
        "Date,Student,Class,Status",
        "2024-03-10,Ann Lee,K-1,Present",
        "2024-03-10,Unknown,Unknown,Late",
    ]
