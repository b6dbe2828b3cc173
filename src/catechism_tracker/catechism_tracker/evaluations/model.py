from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Mapping, Optional, Tuple

from ..core.enums import EvaluationCategory

EvaluationKey = Tuple[int, int]


@dataclass(frozen=True)
class EvaluationEntry:
    """One student's ratings for a chapter, keyed by category code (D, B, HW, AP)."""

    student_id: int
    ratings: Mapping[str, Optional[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class EvaluationRecord:
    """Domain entity: one student's evaluation for one chapter.

    Unique per (student_id, chapter_number).
    """

    student_id: int
    chapter_number: int
    teacher_id: int
    class_id: Optional[int]
    ratings: Dict[EvaluationCategory, str]
    synced_to_sheets: bool = False
    sync_error: Optional[str] = None
    record_id: Optional[int] = None

    @property
    def key(self) -> EvaluationKey:
        return (self.student_id, self.chapter_number)

    def marked_synced(self) -> "EvaluationRecord":
        return replace(self, synced_to_sheets=True, sync_error=None)

    def ratings_json(self) -> Dict[str, str]:
        return {category.value: rating for category, rating in self.ratings.items()}
