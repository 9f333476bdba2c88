from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import get_json_body, json_ok
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _date_from(value):
        return parse_iso_date(str(value)) if value else None

    @app.route("/api/classes/<class_id>/attendance", methods=["GET"], endpoint="api_class_attendance")
    def api_class_attendance(class_id: str):
        records = container.attendance_recorder.records_for_day(class_id, _date_from(request.args.get("date")))
        return json_ok(attendance=records)

    @app.route(
        "/api/classes/<class_id>/attendance/<student_id>",
        methods=["PUT"],
        endpoint="api_class_set_attendance",
    )
    def api_class_set_attendance(class_id: str, student_id: str):
        data = get_json_body()
        on_date = _date_from(data.get("date"))
        current = container.attendance_recorder.records_for_day(class_id, on_date)
        records = container.attendance_recorder.set_status(
            class_id,
            student_id,
            on_date,
            data.get("status"),
            notes=data.get("notes") or None,
            taken_by=data.get("taken_by") or None,
            current=current,
        )
        return json_ok(attendance=records)

    @app.route("/api/classes/<class_id>/attendance", methods=["PUT"], endpoint="api_class_replace_attendance")
    def api_class_replace_attendance(class_id: str):
        """Body: {"date": "YYYY-MM-DD", "statuses": {"<student_id>": "Present" | {"status", "notes"}}}"""

        data = get_json_body()
        statuses = data.get("statuses") or {}
        if not isinstance(statuses, dict):
            raise ValidationError("statuses must be an object keyed by student id")

        saved = container.attendance_recorder.bulk_replace(
            class_id,
            _date_from(data.get("date")),
            statuses,
            taken_by=data.get("taken_by") or None,
        )
        return json_ok(saved=saved, message=f"Attendance saved for {saved} students")

    @app.route(
        "/api/classes/<class_id>/attendance/all-present",
        methods=["POST"],
        endpoint="api_class_mark_all_present",
    )
    def api_class_mark_all_present(class_id: str):
        """Working sheet with everyone Present; nothing is saved."""

        container.roster_service.get_class(class_id)
        statuses = container.attendance_recorder.mark_class_present(class_id)
        return json_ok(statuses=statuses)
