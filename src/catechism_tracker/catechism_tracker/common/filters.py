from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class RecordFilter:
    """Scope for listing attendance/evaluation records. Unset fields don't filter."""

    teacher_id: Optional[int] = None
    class_id: Optional[int] = None
    student_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    chapter_number: Optional[int] = None
    synced: Optional[bool] = None
    limit: Optional[int] = None
