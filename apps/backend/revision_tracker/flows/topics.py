"""Topic flow: scheduling rules combined with storage commands.

ルータから呼ばれる唯一の窓口。行の取得・評価・書き戻しを順に行い、
スケジューリング計算そのものは `srs` の純粋関数へ委譲する。
"""

from __future__ import annotations

from datetime import date

from ..logging import logger
from ..srs import (
    INTERVAL_TABLE,
    RevisionUpdate,
    compute_revision_update,
    days_since_studied,
    is_due_today,
    is_overdue,
)
from ..store import TopicStore
from ..topic_row import TopicField, TopicRow, new_row, parse_row


class TopicNotFoundError(LookupError):
    """Raised when a row index does not address an existing topic row."""

    def __init__(self, row_index: int, row_count: int) -> None:
        super().__init__(f"topic row {row_index} not found ({row_count} rows)")
        self.row_index = row_index
        self.row_count = row_count


class TopicFlow:
    """Query and command operations over topic rows held by a TopicStore."""

    def __init__(self, store: TopicStore, intervals: tuple[int, ...] = INTERVAL_TABLE) -> None:
        self._store = store
        self._intervals = intervals

    def _rows(self) -> list[TopicRow]:
        return [parse_row(raw) for raw in self._store.fetch_all_rows()]

    def list_topics(self) -> list[TopicRow]:
        return self._rows()

    def list_due_today(self, today: date) -> list[TopicRow]:
        """Rows whose days since study exactly match an interval milestone."""

        due: list[TopicRow] = []
        for index, row in enumerate(self._rows()):
            if row.date_studied is None:
                logger.info(
                    "topic_row_skipped",
                    row_index=index,
                    reason="invalid_date_studied",
                    date_studied=row.date_studied_raw,
                )
                continue
            matched = is_due_today(row, today, self._intervals)
            logger.debug(
                "due_today_evaluated",
                row_index=index,
                subject=row.subject,
                date_studied=row.date_studied_raw,
                days_since_studied=days_since_studied(row, today),
                is_due=matched,
            )
            if matched:
                due.append(row)
        logger.info("due_today_listed", today=today.isoformat(), count=len(due))
        return due

    def list_overdue(self, today: date) -> list[TopicRow]:
        overdue = [row for row in self._rows() if is_overdue(row, today, self._intervals)]
        logger.info("overdue_listed", today=today.isoformat(), count=len(overdue))
        return overdue

    def mark_status(self, row_index: int, new_status: str, today: date) -> RevisionUpdate:
        """Recompute the schedule for one row and write status/dates back.

        Reads every row to find the current history, computes the update, then
        writes columns C, D and G of that row in one call.
        """

        rows = self._store.fetch_all_rows()
        if row_index < 0 or row_index >= len(rows):
            raise TopicNotFoundError(row_index, len(rows))

        row = parse_row(rows[row_index])
        update = compute_revision_update(row, today, new_status, self._intervals)
        self._store.write_cells(
            row_index,
            {
                TopicField.status: update.status,
                TopicField.last_revised_date: update.last_revised_date,
                TopicField.next_due_date: update.next_due_date,
            },
        )
        logger.info(
            "topic_status_updated",
            row_index=row_index,
            status=update.status,
            last_revised_date=update.last_revised_date,
            next_due_date=update.next_due_date,
        )
        return update

    def add_topic(self, subject: str, topic: str, notes: str, date_studied: str) -> list[str]:
        raw = new_row(subject, topic, notes, date_studied)
        self._store.append_row(raw)
        logger.info("topic_added", subject=subject, topic=topic, date_studied=date_studied)
        return raw
