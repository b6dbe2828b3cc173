from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import CohortTag


@dataclass(frozen=True)
class LessonOccurrence:
    """A logged catechism lesson. Read-only for this package."""

    lesson_date: date
    cohort: CohortTag
    notes: Optional[str] = None
