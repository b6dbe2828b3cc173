"""Column math for the attendance and evaluation sheet layouts."""

from __future__ import annotations

from datetime import date

from gspread.utils import a1_to_rowcol, rowcol_to_a1

from ..core.constants import (
    ATTENDANCE_FIRST_DATE_COLUMN,
    DEFAULT_SHEETS_TERM_START,
    EVALUATION_COLUMNS_PER_CHAPTER,
    EVALUATION_FIRST_CHAPTER_COLUMN,
)
from ..core.enums import EvaluationCategory

_CATEGORY_OFFSETS = {
    EvaluationCategory.DISCIPLINE: 0,
    EvaluationCategory.BEHAVIOUR: 1,
    EvaluationCategory.HOMEWORK: 2,
    EvaluationCategory.ACTIVE_PARTICIPATION: 3,
}


def column_letter(column: int) -> str:
    """1 -> 'A', 26 -> 'Z', 27 -> 'AA'."""
    return rowcol_to_a1(1, int(column))[:-1]


def column_number(letter: str) -> int:
    return a1_to_rowcol(f"{letter.upper()}1")[1]


def attendance_week_column(attendance_date: date, term_start: date = DEFAULT_SHEETS_TERM_START) -> int:
    """Fallback column for a lesson date: one column per week since term start."""
    weeks = (attendance_date - term_start).days // 7
    return ATTENDANCE_FIRST_DATE_COLUMN + weeks


def evaluation_column(chapter_number: int, category: EvaluationCategory) -> int:
    """Each chapter spans four columns (D, B, HW, AP), chapter 1 starting at F."""
    if int(chapter_number) < 1:
        raise ValueError(f"Chapter must be >= 1, got {chapter_number!r}")
    return (
        EVALUATION_FIRST_CHAPTER_COLUMN
        + (int(chapter_number) - 1) * EVALUATION_COLUMNS_PER_CHAPTER
        + _CATEGORY_OFFSETS[EvaluationCategory(category)]
    )
