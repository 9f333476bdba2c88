from __future__ import annotations

from flask import Flask

from ..common.http import get_json_body, json_ok
from ..container import Container
from .lookups import roster_counts, unassigned_students


def register(app: Flask, container: Container) -> None:
    @app.route("/api/roster", methods=["GET"], endpoint="api_roster")
    def api_roster():
        roster = container.roster_service.load_roster()
        return json_ok(
            roster=roster,
            unassigned_students=unassigned_students(roster),
            contacts=container.assignment_engine.available_contacts(),
            counts=roster_counts(roster),
        )

    @app.route("/api/classes/<class_id>/teachers", methods=["POST"], endpoint="api_class_assign_teacher")
    def api_class_assign_teacher(class_id: str):
        data = get_json_body()
        created = container.roster_service.assign_teacher(class_id, data.get("teacher_id") or "")
        return json_ok(201 if created else 200, created=created)

    @app.route(
        "/api/classes/<class_id>/teachers/<teacher_id>",
        methods=["DELETE"],
        endpoint="api_class_remove_teacher",
    )
    def api_class_remove_teacher(class_id: str, teacher_id: str):
        removed = container.roster_service.remove_teacher(class_id, teacher_id)
        return json_ok(removed=removed)

    @app.route("/api/classes/<class_id>/students", methods=["POST"], endpoint="api_class_assign_student")
    def api_class_assign_student(class_id: str):
        data = get_json_body()
        created = container.roster_service.assign_student(class_id, data.get("student_id") or "")
        return json_ok(201 if created else 200, created=created)

    @app.route(
        "/api/classes/<class_id>/students/<student_id>",
        methods=["DELETE"],
        endpoint="api_class_remove_student",
    )
    def api_class_remove_student(class_id: str, student_id: str):
        removed = container.roster_service.remove_student(class_id, student_id)
        return json_ok(removed=removed)
