from __future__ import annotations

from typing import List, Mapping

from ..core.constants import ATTENDANCE_HIGH_MISSING_THRESHOLD, EVALUATION_HIGH_MISSING_THRESHOLD
from ..core.enums import RecordStream, Severity
from .model import Alert, CompletionSummary, TeacherCompletion


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count > 1 else ''}"


def _alert_for(
    kind: RecordStream,
    completion: TeacherCompletion,
    summary: CompletionSummary,
    *,
    threshold: int,
    noun: str,
) -> Alert:
    missing = summary.missing_count
    return Alert(
        kind=kind,
        severity=Severity.HIGH if missing > threshold else Severity.MEDIUM,
        teacher=completion.teacher,
        message=f"Missing {_plural(missing, noun)}",
        missing_units=tuple(summary.missing_units),
    )


def generate_alerts(
    completion_map: Mapping[int, TeacherCompletion],
    *,
    attendance_high_threshold: int = ATTENDANCE_HIGH_MISSING_THRESHOLD,
    evaluation_high_threshold: int = EVALUATION_HIGH_MISSING_THRESHOLD,
) -> List[Alert]:
    """Missing-submission alerts, High before Medium, otherwise in input order."""

    alerts: List[Alert] = []
    for completion in completion_map.values():
        att = completion.attendance
        if att.total_expected > 0 and att.total_completed < att.total_expected:
            alerts.append(
                _alert_for(
                    RecordStream.ATTENDANCE,
                    completion,
                    att,
                    threshold=attendance_high_threshold,
                    noun="attendance record",
                )
            )

        ev = completion.evaluation
        if ev.total_expected > 0 and ev.total_completed < ev.total_expected:
            alerts.append(
                _alert_for(
                    RecordStream.EVALUATION,
                    completion,
                    ev,
                    threshold=evaluation_high_threshold,
                    noun="chapter evaluation",
                )
            )

    # list.sort is stable
    alerts.sort(key=lambda a: a.severity.rank)
    return alerts
