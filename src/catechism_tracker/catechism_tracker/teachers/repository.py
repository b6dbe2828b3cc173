from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Teacher


class TeacherRepository(Protocol):
    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        raise NotImplementedError

    def list_active_with_class(self) -> Sequence[Teacher]:
        """Active teachers that have a default class, ordered by name."""

        raise NotImplementedError
