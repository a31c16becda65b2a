"""Spaced-repetition scheduling rules for topic rows.

All functions here are pure: they take a TopicRow and the caller's notion of
"today" and return values. Nothing here reads or writes the spreadsheet.

- 復習間隔は INTERVAL_TABLE（1, 3, 7, 15, 30 日）で固定
- 「今日が期日」は学習日からの経過日数が表のいずれかと完全一致する日のみ
- 「期限切れ」は未復習のまま、表のいずれかの間隔を超過した行
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from .topic_row import RevisionStatus, TopicRow


INTERVAL_TABLE: tuple[int, ...] = (1, 3, 7, 15, 30)


@dataclass(frozen=True)
class RevisionUpdate:
    """Field values to persist for one row after a status change."""

    status: str
    last_revised_date: str
    next_due_date: str

    def as_payload(self) -> dict[str, str]:
        return {
            "status": self.status,
            "lastRevisedDate": self.last_revised_date,
            "nextDueDate": self.next_due_date,
        }


def gap_for(revision_count: int, table: tuple[int, ...] = INTERVAL_TABLE) -> int:
    """Return the revision gap in days, clamping the index into the table."""

    index = min(max(revision_count, 0), len(table) - 1)
    return table[index]


def effective_revision_count(row: TopicRow) -> int:
    """Revision count used for gap selection.

    An explicit count wins. Without one, any prior revision history counts as 1
    and a never-revised row counts as 0.
    """

    if row.revision_count is not None:
        return row.revision_count
    return 1 if row.has_revision_history else 0


def compute_revision_update(
    row: TopicRow,
    today: date,
    new_status: str = RevisionStatus.revised.value,
    table: tuple[int, ...] = INTERVAL_TABLE,
) -> RevisionUpdate:
    """Compute status, last revised date and next due date for a status change.

    "Revised" schedules the next review `gap_for(count)` days after today.
    Any other status clears both dates.
    """

    if new_status != RevisionStatus.revised.value:
        return RevisionUpdate(status=new_status, last_revised_date="", next_due_date="")

    gap = gap_for(effective_revision_count(row), table)
    return RevisionUpdate(
        status=RevisionStatus.revised.value,
        last_revised_date=today.isoformat(),
        next_due_date=(today + timedelta(days=gap)).isoformat(),
    )


def days_since_studied(row: TopicRow, today: date) -> int | None:
    """Whole calendar days between the study date and today, or None if unknown."""

    if row.date_studied is None:
        return None
    return (today - row.date_studied).days


def is_due_today(
    row: TopicRow, today: date, table: tuple[int, ...] = INTERVAL_TABLE
) -> bool:
    """True only on the exact days that match an interval milestone."""

    diff_days = days_since_studied(row, today)
    if diff_days is None:
        return False
    return diff_days in table


def is_overdue(
    row: TopicRow, today: date, table: tuple[int, ...] = INTERVAL_TABLE
) -> bool:
    """True for a not-revised row that has passed at least one milestone."""

    if row.status != RevisionStatus.not_revised.value:
        return False
    diff_days = days_since_studied(row, today)
    if diff_days is None:
        return False
    return any(diff_days > interval for interval in table)
