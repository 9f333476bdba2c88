from __future__ import annotations

from flask import Flask

from ..common.http import get_json_body, json_ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/roster/drop", methods=["POST"], endpoint="api_roster_drop")
    def api_roster_drop():
        """Resolve a drag token against a drop-zone token.

        Body: {"item": "student-<id>", "target": "students-drop-zone" | "class-drop-<id>", "selected_class_id": ...}
        Unmapped pairs succeed with action "ignored" and no roster.
        """

        data = get_json_body()
        outcome = container.assignment_engine.drop_tokens(
            str(data.get("item") or ""),
            str(data.get("target") or ""),
            selected_class_id=data.get("selected_class_id") or None,
        )
        return json_ok(
            action=outcome.action,
            changed=outcome.changed,
            class_id=outcome.class_id,
            teacher_id=outcome.teacher_id,
            student_id=outcome.student_id,
            roster=outcome.roster,
        )
