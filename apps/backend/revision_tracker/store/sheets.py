"""Google Sheets backed topic storage.

スプレッドシート API（sheets v4）の values リソースだけを使い、
全行取得・行追加・セル単位の更新を提供する。リトライは行わず、
HttpError などの例外はそのまま呼び出し元へ伝播させる。
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from ..logging import logger
from ..topic_row import FIELD_POSITIONS, ROW_WIDTH, TopicField
from .common import (
    column_letter,
    field_column,
    quote_sheet_name,
    sheet_row_number,
)

_VALUE_INPUT_OPTION = "USER_ENTERED"
_APPEND_LAST_COLUMN = FIELD_POSITIONS[TopicField.date_studied]


class SheetsTopicStore:
    """Topic rows stored in one worksheet, header on row 1, data from row 2."""

    def __init__(self, service: Any, spreadsheet_id: str, sheet_name: str = "Sheet1") -> None:
        if not spreadsheet_id:
            raise ValueError("spreadsheet_id is required")
        self._service = service
        self._spreadsheet_id = spreadsheet_id
        self._sheet = quote_sheet_name(sheet_name or "Sheet1")

    @property
    def spreadsheet_id(self) -> str:
        return self._spreadsheet_id

    def _values(self) -> Any:
        return self._service.spreadsheets().values()

    def _range(self, first_column: int, last_column: int) -> str:
        start = f"{column_letter(first_column)}{sheet_row_number(0)}"
        return f"{self._sheet}!{start}:{column_letter(last_column)}"

    @property
    def read_range(self) -> str:
        return self._range(0, ROW_WIDTH - 1)

    @property
    def append_range(self) -> str:
        return self._range(0, _APPEND_LAST_COLUMN)

    def cell_range(self, field: TopicField | str, row_index: int) -> str:
        return f"{self._sheet}!{field_column(field)}{sheet_row_number(row_index)}"

    def fetch_all_rows(self) -> list[list[str]]:
        """Return all data rows (header excluded). Trailing blank cells are omitted by the API."""

        response = (
            self._values()
            .get(spreadsheetId=self._spreadsheet_id, range=self.read_range)
            .execute()
        )
        rows = response.get("values") or []
        logger.debug("sheets_rows_fetched", range=self.read_range, count=len(rows))
        return [list(row) for row in rows]

    def append_row(self, raw_row: Sequence[Any]) -> None:
        body = {"values": [list(raw_row)]}
        (
            self._values()
            .append(
                spreadsheetId=self._spreadsheet_id,
                range=self.append_range,
                valueInputOption=_VALUE_INPUT_OPTION,
                insertDataOption="INSERT_ROWS",
                body=body,
            )
            .execute()
        )
        logger.debug("sheets_row_appended", range=self.append_range)

    def write_cells(self, row_index: int, values: Mapping[TopicField | str, Any]) -> None:
        """Write several fields of one row in a single batchUpdate call."""

        if not values:
            return
        data = [
            {"range": self.cell_range(field, row_index), "values": [[value]]}
            for field, value in values.items()
        ]
        body = {"valueInputOption": _VALUE_INPUT_OPTION, "data": data}
        (
            self._values()
            .batchUpdate(spreadsheetId=self._spreadsheet_id, body=body)
            .execute()
        )
        logger.debug(
            "sheets_cells_written",
            sheet_row=sheet_row_number(row_index),
            ranges=[entry["range"] for entry in data],
        )
