from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Collection, Dict, Iterable, List, Optional, Tuple

from ..common.datetime_utils import months_before
from ..core.enums import RecordStream, Severity
from ..teachers.model import Teacher


def completion_rate(completed: int, expected: int) -> int:
    if expected <= 0:
        return 0
    # Half-up, not banker's rounding.
    return int(completed * 100 / expected + 0.5)


@dataclass(frozen=True)
class CompletionSummary:
    by_unit: Dict[Any, bool] = field(default_factory=dict)
    total_expected: int = 0
    total_completed: int = 0
    completion_rate: int = 0

    @classmethod
    def from_units(cls, units: Iterable[Any], completed: Collection[Any]) -> "CompletionSummary":
        by_unit = {unit: unit in completed for unit in units}
        done = sum(1 for ok in by_unit.values() if ok)
        return cls(
            by_unit=by_unit,
            total_expected=len(by_unit),
            total_completed=done,
            completion_rate=completion_rate(done, len(by_unit)),
        )

    @property
    def missing_units(self) -> List[Any]:
        return [unit for unit, ok in self.by_unit.items() if not ok]

    @property
    def missing_count(self) -> int:
        return self.total_expected - self.total_completed


@dataclass(frozen=True)
class TeacherCompletion:
    teacher: Teacher
    attendance: CompletionSummary
    evaluation: CompletionSummary


@dataclass(frozen=True)
class ReconciliationWindow:
    start_date: date
    end_date: date

    @classmethod
    def ending(cls, today: date, *, months: int) -> "ReconciliationWindow":
        return cls(start_date=months_before(today, months), end_date=today)


@dataclass(frozen=True)
class Alert:
    kind: RecordStream
    severity: Severity
    teacher: Teacher
    message: str
    missing_units: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class OverviewStats:
    total_teachers: int
    attendance_complete_count: int
    evaluation_complete_count: int
    both_complete_count: int
    attendance_rate: int
    evaluation_rate: int
    overall_rate: int


@dataclass(frozen=True)
class ReconciliationReport:
    """Everything the admin overview shows, computed in one explicit pass."""

    window: Optional[ReconciliationWindow]
    chapters: Tuple[int, ...]
    completion: Dict[int, TeacherCompletion]
    stats: OverviewStats
    alerts: Tuple[Alert, ...]
