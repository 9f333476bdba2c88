from __future__ import annotations

from pathlib import Path

from src.classroom_attendance.classroom_attendance.database.bootstrap import iter_sql_statements

DATABASE_DIR = Path(__file__).resolve().parents[2] / "database"


def test_splits_statements_and_drops_comments_and_db_switches():
    sql = """
    CREATE DATABASE IF NOT EXISTS other_db;
    USE other_db;
    -- roster tables
    CREATE TABLE a (id INT);
    INSERT INTO a VALUES (1);
    """

    assert list(iter_sql_statements(sql)) == ["CREATE TABLE a (id INT)", "INSERT INTO a VALUES (1)"]


def test_semicolons_inside_quotes_do_not_split():
    sql = "INSERT INTO notes VALUES ('late; bus', \"a;b\");INSERT INTO notes VALUES ('it\\'s;ok')"

    assert list(iter_sql_statements(sql)) == [
        "INSERT INTO notes VALUES ('late; bus', \"a;b\")",
        "INSERT INTO notes VALUES ('it\\'s;ok')",
    ]


def test_bundled_sql_files_split_cleanly():
    schema = list(iter_sql_statements((DATABASE_DIR / "schema.sql").read_text(encoding="utf-8")))
    seed = list(iter_sql_statements((DATABASE_DIR / "seed.sql").read_text(encoding="utf-8")))

    assert sum(1 for s in schema if s.upper().startswith("CREATE TABLE")) == 9
    assert all(s.upper().startswith("INSERT IGNORE") for s in seed)
    assert any("CREATE TABLE IF NOT EXISTS checkins (" in s for s in schema)
