from __future__ import annotations

from typing import List, Sequence

from ..attendance.model import AttendanceRecord
from ..core.enums import RecordStream
from ..evaluations.model import EvaluationRecord
from .model import SheetRow


def attendance_rows(records: Sequence[AttendanceRecord]) -> List[SheetRow]:
    return [
        SheetRow(
            stream=RecordStream.ATTENDANCE,
            teacher_id=r.teacher_id,
            student_id=r.student_id,
            record_key=r.key,
            value=r.status.value,
            attendance_date=r.attendance_date,
            column_identifier=r.column_identifier,
        )
        for r in records
    ]


def evaluation_rows(records: Sequence[EvaluationRecord]) -> List[SheetRow]:
    rows: List[SheetRow] = []
    for r in records:
        for category, rating in sorted(r.ratings.items(), key=lambda item: item[0].value):
            rows.append(
                SheetRow(
                    stream=RecordStream.EVALUATION,
                    teacher_id=r.teacher_id,
                    student_id=r.student_id,
                    record_key=r.key,
                    value=rating,
                    chapter_number=r.chapter_number,
                    category=category,
                )
            )
    return rows
