from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..core.constants import (
    ATTENDANCE_HIGH_MISSING_THRESHOLD,
    DEFAULT_RECONCILE_MAX_WORKERS,
    DEFAULT_RECONCILE_WINDOW_MONTHS,
    EVALUATION_HIGH_MISSING_THRESHOLD,
)
from ..evaluations.repository import EvaluationRepository
from ..lessons.model import LessonOccurrence
from ..lessons.repository import LessonRepository
from ..teachers.model import Teacher
from ..teachers.repository import TeacherRepository
from .alerts import generate_alerts
from .eligibility import filter_lessons_for_teacher
from .model import CompletionSummary, ReconciliationReport, ReconciliationWindow, TeacherCompletion
from .stats import overview_stats

logger = logging.getLogger(__name__)


class ReconciliationService:
    """Expected-vs-actual submissions per teacher.

    A unit counts as complete as soon as the teacher saved *any* record for
    it; roster coverage is not checked.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        evaluations: EvaluationRepository,
        teachers: TeacherRepository,
        lessons: LessonRepository,
        *,
        max_workers: int = DEFAULT_RECONCILE_MAX_WORKERS,
        window_months: int = DEFAULT_RECONCILE_WINDOW_MONTHS,
        attendance_high_threshold: int = ATTENDANCE_HIGH_MISSING_THRESHOLD,
        evaluation_high_threshold: int = EVALUATION_HIGH_MISSING_THRESHOLD,
    ):
        self._attendance = attendance
        self._evaluations = evaluations
        self._teachers = teachers
        self._lessons = lessons
        self._max_workers = max(1, int(max_workers))
        self._window_months = int(window_months)
        self._attendance_high_threshold = int(attendance_high_threshold)
        self._evaluation_high_threshold = int(evaluation_high_threshold)

    def chapter_universe(self) -> List[int]:
        """Every chapter anyone has evaluated; empty until the first evaluation."""

        return sorted(set(self._evaluations.list_distinct_chapters()))

    def window_ending(self, today: Optional[date] = None) -> ReconciliationWindow:
        return ReconciliationWindow.ending(today or now_local().date(), months=self._window_months)

    def reconcile(
        self,
        teachers: Sequence[Teacher],
        lessons: Sequence[LessonOccurrence],
        chapters: Sequence[int],
    ) -> Dict[int, TeacherCompletion]:
        """Completion per teacher id, for teachers that have a class.

        Teacher passes run concurrently; the map is only built once every pass
        has finished, and the first failing pass is re-raised.
        """

        eligible = [t for t in teachers if t.has_class]
        if not eligible:
            return {}

        unit_chapters = sorted(set(int(c) for c in chapters))
        workers = min(self._max_workers, len(eligible))

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="reconcile") as pool:
            futures = [
                (teacher, pool.submit(self._reconcile_teacher, teacher, lessons, unit_chapters))
                for teacher in eligible
            ]
            wait([future for _, future in futures])

        result: Dict[int, TeacherCompletion] = {}
        for teacher, future in futures:
            result[teacher.teacher_id] = future.result()

        logger.info(
            "Reconciled %d teachers over %d lessons and %d chapters",
            len(result),
            len(lessons),
            len(unit_chapters),
        )
        return result

    def _reconcile_teacher(
        self,
        teacher: Teacher,
        lessons: Sequence[LessonOccurrence],
        chapters: Sequence[int],
    ) -> TeacherCompletion:
        expected_dates = sorted({lesson.lesson_date for lesson in filter_lessons_for_teacher(lessons, teacher)})

        submitted_dates = set()
        if expected_dates:
            submitted_dates = self._attendance.list_dates_for_teacher(
                teacher_id=teacher.teacher_id,
                start_date=expected_dates[0],
                end_date=expected_dates[-1],
            )

        submitted_chapters = set()
        if chapters:
            submitted_chapters = self._evaluations.list_chapters_for_teacher(teacher_id=teacher.teacher_id)

        return TeacherCompletion(
            teacher=teacher,
            attendance=CompletionSummary.from_units(expected_dates, submitted_dates),
            evaluation=CompletionSummary.from_units(chapters, submitted_chapters),
        )

    def build_report(self, today: Optional[date] = None) -> ReconciliationReport:
        """Load teachers, lessons in the rolling window and the chapter universe, then reconcile."""

        window = self.window_ending(today)
        teachers = list(self._teachers.list_active_with_class())
        lessons = list(self._lessons.list_in_window(start_date=window.start_date, end_date=window.end_date))
        chapters: Tuple[int, ...] = tuple(self.chapter_universe())

        completion = self.reconcile(teachers, lessons, chapters)
        alerts = generate_alerts(
            completion,
            attendance_high_threshold=self._attendance_high_threshold,
            evaluation_high_threshold=self._evaluation_high_threshold,
        )
        return ReconciliationReport(
            window=window,
            chapters=chapters,
            completion=completion,
            stats=overview_stats(completion),
            alerts=tuple(alerts),
        )
