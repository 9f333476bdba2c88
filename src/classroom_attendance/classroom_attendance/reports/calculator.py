from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..core.enums import AttendanceStatus


def attendance_rate(present: int, late: int, total: int) -> int:
    """round(100 * (present + late) / total), halves rounded up; 0 for an empty scope.

    Excused and Absent only count in the denominator.
    """

    if total <= 0:
        return 0
    return (200 * (present + late) + total) // (2 * total)


def per_session_average(checkins: int, sessions: int) -> int:
    """Check-ins per session, halves rounded up; 0 when there were no sessions."""

    if sessions <= 0:
        return 0
    return (2 * checkins + sessions) // (2 * sessions)


@dataclass
class StatusCounter:
    """Running per-status totals for one aggregation bucket."""

    total: int = 0
    present: int = 0
    late: int = 0
    absent: int = 0
    excused: int = 0

    def add(self, status: AttendanceStatus) -> None:
        self.total += 1
        if status is AttendanceStatus.PRESENT:
            self.present += 1
        elif status is AttendanceStatus.LATE:
            self.late += 1
        elif status is AttendanceStatus.ABSENT:
            self.absent += 1
        elif status is AttendanceStatus.EXCUSED:
            self.excused += 1

    def extend(self, statuses: Iterable[AttendanceStatus]) -> "StatusCounter":
        for s in statuses:
            self.add(s)
        return self

    @property
    def rate(self) -> int:
        return attendance_rate(self.present, self.late, self.total)
