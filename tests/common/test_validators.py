from __future__ import annotations

from datetime import date

import pytest

from src.classroom_attendance.classroom_attendance.common.datetime_utils import (
    iter_days,
    month_bounds,
    parse_iso_date,
    short_us_date,
)
from src.classroom_attendance.classroom_attendance.common.validators import (
    require_count,
    require_month,
    require_non_empty,
    require_status,
    require_year,
)
from src.classroom_attendance.classroom_attendance.core.enums import AttendanceStatus
from src.classroom_attendance.classroom_attendance.core.exceptions import ValidationError


def test_require_status_normalizes_case():
    assert require_status("late") is AttendanceStatus.LATE
    assert require_status(" EXCUSED ") is AttendanceStatus.EXCUSED
    assert require_status(AttendanceStatus.PRESENT) is AttendanceStatus.PRESENT


@pytest.mark.parametrize("value", ["", None, "Tardy"])
def test_require_status_rejects_unknown(value):
    with pytest.raises(ValidationError):
        require_status(value)


def test_require_non_empty():
    assert require_non_empty("  class-1 ", "Class id") == "class-1"
    with pytest.raises(ValidationError):
        require_non_empty("   ", "Class id")


def test_date_helpers():
    assert parse_iso_date("2024-03-10") == date(2024, 3, 10)
    with pytest.raises(ValidationError):
        parse_iso_date("10/03/2024")
    assert month_bounds(2023, 2) == (date(2023, 2, 1), date(2023, 2, 28))
    assert len(list(iter_days(date(2024, 2, 27), date(2024, 3, 2)))) == 5
    assert short_us_date(date(2024, 3, 5)) == "3/5/2024"


@pytest.mark.parametrize("value", [0, -1, 10000])
def test_require_year_rejects_out_of_range(value):
    with pytest.raises(ValidationError):
        require_year(value)


def test_require_year_and_month_accept_bounds():
    assert require_year("1") == 1
    assert require_year(9999) == 9999
    assert require_month("12") == 12


def test_require_count():
    assert require_count("7", "Headcount") == 7
    assert require_count(0, "Headcount") == 0
    for bad in (-1, "seven", None, False):
        with pytest.raises(ValidationError):
            require_count(bad, "Headcount")
