from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Teacher:
    """Domain entity: a catechism teacher and the class assigned to them.

    Note: `class_id` stays None until an admin assigns a class; such teachers
    are left out of reconciliation.
    """

    teacher_id: int
    full_name: str
    email: str
    class_id: Optional[int] = None
    year_level: Optional[int] = None
    class_name: Optional[str] = None

    @property
    def has_class(self) -> bool:
        return self.class_id is not None and self.year_level is not None
