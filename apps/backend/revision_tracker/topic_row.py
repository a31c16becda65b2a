"""Row model for one topic record stored in the spreadsheet.

シートの 1 行（A..I 列）を型付きの TopicRow として扱う。末尾のセルが欠けた
短い行や不正な値を含む行でも例外は投げず、該当フィールドを「欠損」として表す。
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Any


ISO_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


class RevisionStatus(str, Enum):
    """Review state of a topic."""

    not_revised = "Not Revised"
    revised = "Revised"


class TopicField(str, Enum):
    """Semantic fields of a topic row, in column order."""

    subject = "subject"
    topic = "topic"
    status = "status"
    last_revised_date = "lastRevisedDate"
    notes = "notes"
    date_studied = "dateStudied"
    next_due_date = "nextDueDate"
    revision_count = "revisionCount"


# 列位置（0 始まり）。7 (H 列) は予約済みで使用しない。
FIELD_POSITIONS: dict[TopicField, int] = {
    TopicField.subject: 0,
    TopicField.topic: 1,
    TopicField.status: 2,
    TopicField.last_revised_date: 3,
    TopicField.notes: 4,
    TopicField.date_studied: 5,
    TopicField.next_due_date: 6,
    TopicField.revision_count: 8,
}

ROW_WIDTH = max(FIELD_POSITIONS.values()) + 1


def _cell(raw: Sequence[Any], position: int, *, strip: bool = True) -> str:
    if position >= len(raw):
        return ""
    value = raw[position]
    if value is None:
        return ""
    text = str(value)
    return text.strip() if strip else text


def parse_iso_date(value: str | None) -> date | None:
    """Parse a `YYYY-MM-DD` string, returning None when it does not match.

    形式チェックは生のセル文字列に対して行う（前後の空白も不一致）。
    月・日の範囲外は暦の繰り上がりで解釈する: 2024-02-30 は 2024-03-01、
    2024-13-01 は 2025-01-01、日 00 は前月末日。年 0000-0099 は 1900 年代として扱う。
    """

    if not value or not ISO_DATE_PATTERN.fullmatch(value):
        return None
    year, month, day = (int(part) for part in value.split("-"))
    if year < 100:
        year += 1900
    months = year * 12 + month - 1
    try:
        return date(months // 12, months % 12 + 1, 1) + timedelta(days=day - 1)
    except (ValueError, OverflowError):
        return None


def _parse_revision_count(value: str) -> int | None:
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class TopicRow:
    """Typed, immutable view of one topic row."""

    subject: str
    topic: str
    status: str
    last_revised_date: str
    notes: str
    date_studied: date | None
    date_studied_raw: str
    next_due_date: date | None
    revision_count: int | None
    raw: tuple[str, ...] = field(default=(), repr=False)

    @property
    def has_revision_history(self) -> bool:
        return bool(self.last_revised_date)

    def to_cells(self) -> list[str]:
        """Return the row exactly as stored, for JSON responses."""

        return list(self.raw)


def parse_row(raw: Sequence[Any] | None) -> TopicRow:
    """Convert a raw spreadsheet row into a TopicRow.

    Never raises: short rows, blank cells and unparseable values become absent.
    Status and date cells are kept verbatim; the other text cells are trimmed.
    """

    cells: Sequence[Any] = raw or ()
    date_studied_raw = _cell(cells, FIELD_POSITIONS[TopicField.date_studied], strip=False)
    return TopicRow(
        subject=_cell(cells, FIELD_POSITIONS[TopicField.subject]),
        topic=_cell(cells, FIELD_POSITIONS[TopicField.topic]),
        status=_cell(cells, FIELD_POSITIONS[TopicField.status], strip=False),
        last_revised_date=_cell(cells, FIELD_POSITIONS[TopicField.last_revised_date], strip=False),
        notes=_cell(cells, FIELD_POSITIONS[TopicField.notes]),
        date_studied=parse_iso_date(date_studied_raw),
        date_studied_raw=date_studied_raw,
        next_due_date=parse_iso_date(
            _cell(cells, FIELD_POSITIONS[TopicField.next_due_date], strip=False)
        ),
        revision_count=_parse_revision_count(
            _cell(cells, FIELD_POSITIONS[TopicField.revision_count])
        ),
        raw=tuple("" if value is None else str(value) for value in cells),
    )


def new_row(subject: str, topic: str, notes: str, date_studied: str) -> list[str]:
    """Build the raw cells for a freshly added topic (columns A..F)."""

    return [
        subject,
        topic,
        RevisionStatus.not_revised.value,
        "",
        notes,
        date_studied,
    ]
