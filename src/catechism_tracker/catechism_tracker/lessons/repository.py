from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import LessonOccurrence


class LessonRepository(Protocol):
    def list_in_window(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[LessonOccurrence]:
        """Lessons ordered by date, newest first."""

        raise NotImplementedError
