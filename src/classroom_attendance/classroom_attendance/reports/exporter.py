from __future__ import annotations

import csv
import io
from typing import Iterable, Optional, Sequence, Union

from ..core.constants import UNKNOWN_LABEL
from .model import AttendanceReport, OverallStats, ReportRecord, ReportWindow, StudentSummary

STUDENT_HEADER = ("Student Name", "Class", "Total Days", "Present", "Late", "Absent", "Attendance Rate")
RECORDS_HEADER = ("Date", "Student", "Class", "Status")


def report_filename(window: ReportWindow) -> str:
    return f"attendance-report-{window.period}.csv"


def export_csv(
    report_or_summary: Union[AttendanceReport, Sequence[StudentSummary]],
    overall: Optional[OverallStats] = None,
    window: Optional[ReportWindow] = None,
) -> str:
    """Render the per-student report table.

    Accepts a full AttendanceReport, or a student summary with its overall
    stats and window. Fields are quoted by the csv writer when needed.
    """

    if isinstance(report_or_summary, AttendanceReport):
        summary = report_or_summary.student_summary
        overall = overall or report_or_summary.overall
        window = window or report_or_summary.window
    else:
        summary = report_or_summary

    if overall is None or window is None:
        raise TypeError("overall and window are required when exporting a bare student summary")

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")

    writer.writerow([window.title])
    writer.writerow([])
    writer.writerow([f"Overall Attendance Rate: {overall.attendance_rate}%"])
    writer.writerow([f"Total Records: {overall.total_records}"])
    writer.writerow([f"Unique Students: {overall.unique_students}"])
    writer.writerow([])
    writer.writerow(STUDENT_HEADER)

    for s in summary:
        writer.writerow([s.name, s.class_name, s.total_days, s.present, s.late, s.absent, f"{s.attendance_rate}%"])

    return buf.getvalue()


def export_records_csv(records: Iterable[ReportRecord]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(RECORDS_HEADER)

    for r in records:
        writer.writerow(
            [
                r.date.isoformat(),
                r.student.full_name if r.student else UNKNOWN_LABEL,
                r.school_class.name if r.school_class else UNKNOWN_LABEL,
                r.status.value,
            ]
        )

    return buf.getvalue()
