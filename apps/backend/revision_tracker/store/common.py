from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from ..topic_row import FIELD_POSITIONS, TopicField


# 1 行目はヘッダ。外部の行番号 i はシート上の i + 2 行目に対応する。
HEADER_OFFSET = 2


class StoreConfigurationError(RuntimeError):
    """Raised when credentials or the target sheet cannot be configured."""


class TopicStore(Protocol):
    """Narrow interface the topic flow needs from persistent storage."""

    def fetch_all_rows(self) -> list[list[str]]: ...

    def append_row(self, raw_row: Sequence[Any]) -> None: ...

    def write_cells(self, row_index: int, values: Mapping[TopicField | str, Any]) -> None: ...


def column_letter(position: int) -> str:
    """Convert a 0-based column position to its A1 letter (0 -> A, 26 -> AA)."""

    if position < 0:
        raise ValueError("column position must be non-negative")
    letters = ""
    number = position + 1
    while number:
        number, remainder = divmod(number - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def sheet_row_number(row_index: int) -> int:
    """Map a 0-based data row index to the 1-based sheet row number."""

    if row_index < 0:
        raise ValueError("row index must be non-negative")
    return row_index + HEADER_OFFSET


def quote_sheet_name(sheet_name: str) -> str:
    """Quote a sheet name for A1 notation when it contains non-word characters."""

    if sheet_name.replace("_", "").isalnum():
        return sheet_name
    escaped = sheet_name.replace("'", "''")
    return f"'{escaped}'"


def field_column(field: TopicField | str) -> str:
    """Return the column letter for a topic field (accepts enum or wire name)."""

    resolved = field if isinstance(field, TopicField) else TopicField(field)
    return column_letter(FIELD_POSITIONS[resolved])
