from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import gspread
from gspread.utils import absolute_range_name, rowcol_to_a1

from ..core.constants import DEFAULT_SHEETS_HEADER_ROW, DEFAULT_SHEETS_TERM_START
from ..core.enums import RecordStream
from ..core.exceptions import SheetSyncError
from .adapter import SheetDirectory, SheetSyncAdapter
from .columns import attendance_week_column, evaluation_column
from .model import CellUpdate, SheetRow, SheetWriteResult, StudentLocation

logger = logging.getLogger(__name__)

_AUTH_STATUS_CODES = {401, 403}
_MAX_AUTH_RETRIES = 2


def _status_code(exc: gspread.exceptions.APIError) -> Optional[int]:
    response = getattr(exc, "response", None)
    return getattr(response, "status_code", None)


class GspreadSheetAdapter(SheetSyncAdapter):
    """Writes record cells into Google Sheets through gspread.

    Cells are grouped per (spreadsheet, worksheet) and each group goes out as a
    single `values_batch_update`. A failing group only fails its own rows.
    """

    def __init__(
        self,
        directory: SheetDirectory,
        *,
        client_factory: Optional[Callable[[], gspread.Client]] = None,
        credentials_file: Optional[str] = None,
        header_row: int = DEFAULT_SHEETS_HEADER_ROW,
        term_start: date = DEFAULT_SHEETS_TERM_START,
    ):
        self._directory = directory
        self._client_factory = client_factory
        self._credentials_file = credentials_file
        self._header_row = int(header_row)
        self._term_start = term_start
        self._client: Optional[gspread.Client] = None

    def _get_client(self, *, refresh: bool = False) -> gspread.Client:
        if self._client is not None and not refresh:
            return self._client

        if self._client_factory is not None:
            self._client = self._client_factory()
        elif self._credentials_file:
            self._client = gspread.service_account(filename=self._credentials_file)
        else:
            raise SheetSyncError("Google Sheets credentials are not configured")
        return self._client

    def write_batch(self, rows: Sequence[SheetRow]) -> SheetWriteResult:
        if not rows:
            return SheetWriteResult.success()

        failed: List[SheetRow] = []
        errors: List[str] = []
        groups: "OrderedDict[Tuple[str, str], List[Tuple[SheetRow, StudentLocation]]]" = OrderedDict()

        for row in rows:
            spreadsheet_id = self._directory.spreadsheet_id_for(teacher_id=row.teacher_id, stream=row.stream)
            location = self._directory.student_location(student_id=row.student_id, stream=row.stream)
            if not spreadsheet_id or location is None:
                failed.append(row)
                errors.append(f"No sheet address for student {row.student_id}")
                continue
            groups.setdefault((spreadsheet_id, location.sheet_name), []).append((row, location))

        for (spreadsheet_id, sheet_name), located in groups.items():
            try:
                self._write_group(spreadsheet_id, sheet_name, located)
            except (gspread.exceptions.GSpreadException, SheetSyncError) as exc:
                logger.warning(
                    "Sheet write failed for %s/%s (%d cells): %s",
                    spreadsheet_id,
                    sheet_name,
                    len(located),
                    exc,
                )
                failed.extend(row for row, _ in located)
                errors.append(str(exc))

        if failed:
            return SheetWriteResult(ok=False, failed_rows=tuple(failed), error="; ".join(errors))
        return SheetWriteResult.success()

    def _write_group(
        self, spreadsheet_id: str, sheet_name: str, located: Sequence[Tuple[SheetRow, StudentLocation]]
    ) -> None:
        attempt = 0
        while True:
            try:
                spreadsheet = self._get_client(refresh=attempt > 0).open_by_key(spreadsheet_id)
                updates = self._cell_updates(spreadsheet, sheet_name, located)
                spreadsheet.values_batch_update(
                    body={
                        "valueInputOption": "USER_ENTERED",
                        "data": [
                            {
                                "range": absolute_range_name(u.sheet_name, rowcol_to_a1(u.row, u.column)),
                                "values": [[u.value]],
                            }
                            for u in updates
                        ],
                    }
                )
                logger.info("Wrote %d cells to %s/%s", len(updates), spreadsheet_id, sheet_name)
                return
            except gspread.exceptions.APIError as exc:
                if _status_code(exc) in _AUTH_STATUS_CODES and attempt < _MAX_AUTH_RETRIES:
                    attempt += 1
                    logger.info("Sheets auth error, re-authorizing (attempt %d)", attempt)
                    continue
                raise

    def _cell_updates(
        self, spreadsheet, sheet_name: str, located: Sequence[Tuple[SheetRow, StudentLocation]]
    ) -> List[CellUpdate]:
        header: Optional[Dict[str, int]] = None
        updates: List[CellUpdate] = []

        for row, location in located:
            if row.stream == RecordStream.ATTENDANCE:
                if header is None:
                    header = self._header_columns(spreadsheet.worksheet(sheet_name))
                column = header.get(row.column_identifier or "")
                if column is None:
                    column = attendance_week_column(row.attendance_date, self._term_start)
            else:
                column = evaluation_column(row.chapter_number, row.category)

            updates.append(
                CellUpdate(sheet_name=sheet_name, row=location.row_number, column=column, value=row.value, source=row)
            )
        return updates

    def _header_columns(self, worksheet) -> Dict[str, int]:
        labels = worksheet.row_values(self._header_row)
        return {label.strip(): index for index, label in enumerate(labels, start=1) if label and label.strip()}
