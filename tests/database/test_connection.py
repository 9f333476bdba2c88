from __future__ import annotations

from src.classroom_attendance.classroom_attendance.container import build_container
from src.classroom_attendance.classroom_attendance.database.connection import DBConfig


def test_db_config_defaults():
    config = DBConfig.from_dict({"password": "secret"})

    assert (config.host, config.port, config.user, config.database) == ("localhost", 3306, "root", "classroom_attendance")


def test_each_container_gets_its_own_config():
    # Connections are opened lazily, so no server is needed here.
    first = build_container(db_config={"database": "attendance_a"})
    second = build_container(db_config={"database": "attendance_b", "port": "3307"})

    assert first.conn.config.database == "attendance_a"
    assert second.conn.config.database == "attendance_b"
    assert second.conn.config.port == 3307
