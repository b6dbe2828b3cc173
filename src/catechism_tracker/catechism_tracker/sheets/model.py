from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Hashable, Optional, Tuple

from ..core.enums import EvaluationCategory, RecordStream


@dataclass(frozen=True)
class SheetRow:
    """One cell to write into a teacher's spreadsheet.

    `record_key` ties the cell back to the stored record so a failed write can
    leave exactly that record unsynced.
    """

    stream: RecordStream
    teacher_id: int
    student_id: int
    record_key: Hashable
    value: str
    attendance_date: Optional[date] = None
    column_identifier: Optional[str] = None
    chapter_number: Optional[int] = None
    category: Optional[EvaluationCategory] = None


@dataclass(frozen=True)
class SheetWriteResult:
    ok: bool
    failed_rows: Tuple[SheetRow, ...] = ()
    error: Optional[str] = None

    @classmethod
    def success(cls) -> "SheetWriteResult":
        return cls(ok=True)


@dataclass(frozen=True)
class StudentLocation:
    """Where a student's row lives inside a spreadsheet."""

    sheet_name: str
    row_number: int


@dataclass(frozen=True)
class CellUpdate:
    sheet_name: str
    row: int
    column: int
    value: Any
    source: SheetRow
