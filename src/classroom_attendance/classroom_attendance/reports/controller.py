from __future__ import annotations

from flask import Flask, Response, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import json_ok
from ..container import Container
from ..core.enums import ReportMode
from ..core.exceptions import ValidationError
from .exporter import export_csv, export_records_csv, report_filename
from .model import ReportWindow


def register(app: Flask, container: Container) -> None:
    def _window_from_args() -> ReportWindow:
        today = container.clock()
        try:
            mode = ReportMode(request.args.get("mode") or ReportMode.MONTHLY.value)
            year = int(request.args.get("year") or today.year)
            month = int(request.args.get("month") or today.month)
        except ValueError:
            raise ValidationError("mode must be monthly or yearly; year and month must be numbers")

        if mode is ReportMode.YEARLY:
            return ReportWindow.yearly(year)
        return ReportWindow.monthly(year, month)

    def _csv_response(body: str, filename: str) -> Response:
        return Response(
            body,
            mimetype="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.route("/api/reports", methods=["GET"], endpoint="api_reports")
    def api_reports():
        window = _window_from_args()
        report = container.reporting_engine.fetch_report(window, class_id=request.args.get("class_id") or None)
        return json_ok(
            window={
                "mode": window.mode,
                "start": window.start,
                "end": window.end,
                "period": window.period,
                "title": window.title,
            },
            overall=report.overall,
            class_summary=report.class_summary,
            student_summary=report.student_summary,
            monthly_breakdown=report.monthly_breakdown,
            daily_breakdown=report.daily_breakdown,
        )

    @app.route("/api/reports.csv", methods=["GET"], endpoint="api_reports_csv")
    def api_reports_csv():
        window = _window_from_args()
        report = container.reporting_engine.fetch_report(window, class_id=request.args.get("class_id") or None)
        return _csv_response(export_csv(report), report_filename(window))

    @app.route("/api/reports/records.csv", methods=["GET"], endpoint="api_reports_records_csv")
    def api_reports_records_csv():
        window = _window_from_args()
        records = container.reporting_engine.fetch_records(
            window,
            class_id=request.args.get("class_id") or None,
            status=request.args.get("status") or None,
        )
        return _csv_response(export_records_csv(records), f"attendance-records-{window.period}.csv")

    @app.route("/api/reports/daily", methods=["GET"], endpoint="api_reports_daily")
    def api_reports_daily():
        value = request.args.get("date")
        overview = container.reporting_engine.daily_overview(parse_iso_date(value) if value else None)
        return json_ok(
            on_date=overview.on_date,
            classes=overview.classes,
            total_students=overview.total_students,
            total_marked=overview.total_marked,
            completed_classes=overview.completed_classes,
        )

    @app.route("/api/reports/sessions", methods=["GET"], endpoint="api_reports_sessions")
    def api_reports_sessions():
        start = request.args.get("start")
        end = request.args.get("end")
        stats = container.reporting_engine.session_stats(
            parse_iso_date(start) if start else None,
            parse_iso_date(end) if end else None,
        )
        return json_ok(
            start=stats.start,
            end=stats.end,
            total_sessions=stats.total_sessions,
            total_checkins=stats.total_checkins,
            total_headcount=stats.total_headcount,
            average_per_session=stats.average_per_session,
            days=stats.days,
        )
