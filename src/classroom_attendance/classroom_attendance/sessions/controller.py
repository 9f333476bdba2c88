from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import get_json_body, json_ok
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _date_arg():
        value = request.args.get("date")
        return parse_iso_date(value) if value else None

    @app.route("/api/classes/<class_id>/view", methods=["GET"], endpoint="api_class_view")
    def api_class_view(class_id: str):
        view = container.session_controller.select_class(class_id, today=_date_arg())
        tally = container.attendance_recorder.tally(view.attendance, len(view.students))
        return json_ok(
            school_class=view.school_class,
            teachers=view.teachers,
            students=view.students,
            session=view.session.active_session,
            session_active=view.session.is_active,
            on_date=view.on_date,
            attendance=view.attendance,
            tally=tally,
        )

    @app.route("/api/classes/<class_id>/sessions", methods=["GET"], endpoint="api_class_sessions")
    def api_class_sessions(class_id: str):
        sessions = container.session_controller.list_sessions(class_id)
        counts = container.session_controller.checkin_counts(s.session_id for s in sessions)
        return json_ok(sessions=sessions, checkin_counts=counts)

    @app.route("/api/classes/<class_id>/sessions", methods=["POST"], endpoint="api_class_start_session")
    def api_class_start_session(class_id: str):
        session = container.session_controller.start(class_id)
        return json_ok(201, session=session, message=f"Check-in started: {session.name}")

    @app.route("/api/sessions/<session_id>/end", methods=["POST"], endpoint="api_session_end")
    def api_session_end(session_id: str):
        session = container.session_controller.end(session_id)
        return json_ok(session=session, message=f"Check-in ended: {session.name}")

    @app.route("/api/sessions/<session_id>/checkins", methods=["GET"], endpoint="api_session_checkins")
    def api_session_checkins(session_id: str):
        sheet = container.session_controller.checkin_sheet(session_id)
        return json_ok(
            session=sheet.session,
            checkins=sheet.checkins,
            checked_in=sheet.checked_in,
            still_here=sheet.still_here,
            checked_out=sheet.checked_out,
        )

    @app.route("/api/sessions/<session_id>/checkins", methods=["POST"], endpoint="api_session_check_in")
    def api_session_check_in(session_id: str):
        """Body: {"student_id"} | {"student_ids": [...]} | {"guest_name", "notes"}, plus optional "checked_in_by"."""

        data = get_json_body()
        controller = container.session_controller
        checked_in_by = data.get("checked_in_by") or None

        if "student_ids" in data:
            student_ids = data.get("student_ids")
            if not isinstance(student_ids, list):
                raise ValidationError("student_ids must be a list")
            checkins = controller.bulk_check_in(session_id, student_ids, checked_in_by=checked_in_by)
            return json_ok(201, checkins=checkins, message=f"{len(checkins)} students checked in")

        if data.get("guest_name"):
            checkin = controller.check_in_guest(
                session_id,
                data.get("guest_name"),
                notes=data.get("notes") or None,
                checked_in_by=checked_in_by,
            )
            return json_ok(201, checkin=checkin, message=f"Guest {checkin.guest_name} checked in")

        checkin = controller.check_in(session_id, data.get("student_id"), checked_in_by=checked_in_by)
        return json_ok(201, checkin=checkin, message="Checked in")

    @app.route("/api/checkins/<checkin_id>/checkout", methods=["POST"], endpoint="api_checkin_checkout")
    def api_checkin_checkout(checkin_id: str):
        data = get_json_body()
        checkin = container.session_controller.check_out(checkin_id, checked_out_by=data.get("checked_out_by") or None)
        return json_ok(checkin=checkin, message="Checked out successfully")

    @app.route("/api/sessions/<session_id>/headcount", methods=["PUT"], endpoint="api_session_headcount")
    def api_session_headcount(session_id: str):
        data = get_json_body()
        session = container.session_controller.set_headcount(session_id, data.get("headcount"))
        return json_ok(session=session, message="Headcount updated")
