"""Who owes an attendance submission for which logged lesson."""

from __future__ import annotations

from typing import Iterable, List, Optional

from ..core.constants import JUNIOR_MAX_YEAR_LEVEL
from ..core.enums import CohortTag
from ..lessons.model import LessonOccurrence
from ..teachers.model import Teacher


def cohort_for_year_level(year_level: int) -> CohortTag:
    return CohortTag.JUNIOR if int(year_level) <= JUNIOR_MAX_YEAR_LEVEL else CohortTag.SENIOR


def is_teacher_expected_for(teacher: Teacher, lesson: LessonOccurrence) -> bool:
    if lesson.cohort == CohortTag.BOTH:
        return True
    if teacher.year_level is None:
        return False
    return cohort_for_year_level(teacher.year_level) == lesson.cohort


def filter_lessons_for_teacher(
    lessons: Iterable[LessonOccurrence], teacher: Teacher
) -> List[LessonOccurrence]:
    return [lesson for lesson in lessons if is_teacher_expected_for(teacher, lesson)]


def group_label(year_level: Optional[int]) -> Optional[str]:
    if year_level is None:
        return None
    return cohort_for_year_level(year_level).value
