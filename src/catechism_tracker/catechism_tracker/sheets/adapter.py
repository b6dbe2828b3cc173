from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import RecordStream
from .model import SheetRow, SheetWriteResult, StudentLocation


class SheetSyncAdapter(Protocol):
    def write_batch(self, rows: Sequence[SheetRow]) -> SheetWriteResult:
        """Write cells by coordinate (overwrite, never append).

        May raise for whole-batch failures; per-row failures come back in
        `failed_rows`.
        """

        raise NotImplementedError


class SheetDirectory(Protocol):
    """Resolves spreadsheet addressing for teachers and students."""

    def spreadsheet_id_for(self, *, teacher_id: int, stream: RecordStream) -> Optional[str]:
        raise NotImplementedError

    def student_location(self, *, student_id: int, stream: RecordStream) -> Optional[StudentLocation]:
        raise NotImplementedError
