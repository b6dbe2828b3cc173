from __future__ import annotations

from typing import Mapping

from .model import OverviewStats, TeacherCompletion, completion_rate


def overview_stats(completion_map: Mapping[int, TeacherCompletion]) -> OverviewStats:
    """Share of teachers at 100% in each stream and in both."""

    total = len(completion_map)
    attendance_done = 0
    evaluation_done = 0
    both_done = 0
    for completion in completion_map.values():
        att = completion.attendance.completion_rate == 100
        ev = completion.evaluation.completion_rate == 100
        attendance_done += att
        evaluation_done += ev
        both_done += att and ev

    return OverviewStats(
        total_teachers=total,
        attendance_complete_count=attendance_done,
        evaluation_complete_count=evaluation_done,
        both_complete_count=both_done,
        attendance_rate=completion_rate(attendance_done, total),
        evaluation_rate=completion_rate(evaluation_done, total),
        overall_rate=completion_rate(both_done, total),
    )
