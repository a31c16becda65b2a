from __future__ import annotations

from datetime import date, timedelta

import pytest

from revision_tracker.srs import (
    INTERVAL_TABLE,
    compute_revision_update,
    days_since_studied,
    effective_revision_count,
    gap_for,
    is_due_today,
    is_overdue,
)
from revision_tracker.topic_row import parse_row

TODAY = date(2024, 1, 10)


def _row(status: str = "Not Revised", last_revised: str = "", studied: str = "", count: str | None = None):
    raw = ["Math", "Algebra", status, last_revised, "", studied]
    if count is not None:
        raw += ["", "", count]
    return parse_row(raw)


def _days_ago(days: int) -> str:
    return (TODAY - timedelta(days=days)).isoformat()


def test_gap_for_clamps_both_ends() -> None:
    assert gap_for(-100) == 1
    assert gap_for(-1) == 1
    assert gap_for(0) == 1
    assert gap_for(4) == 30
    assert gap_for(100) == 30


def test_gap_for_is_non_decreasing() -> None:
    gaps = [gap_for(n) for n in range(-3, 10)]
    assert gaps == sorted(gaps)
    assert [gap_for(n) for n in range(len(INTERVAL_TABLE))] == list(INTERVAL_TABLE)


@pytest.mark.parametrize(
    ("last_revised", "count", "expected"),
    [
        ("", None, 0),
        ("2024-01-01", None, 1),
        ("2024-01-01", "3", 3),
        ("", "2", 2),
        ("2024-01-01", "abc", 1),
    ],
)
def test_effective_revision_count_defaults(last_revised: str, count: str | None, expected: int) -> None:
    row = _row(last_revised=last_revised, count=count)
    assert effective_revision_count(row) == expected


def test_mark_revised_without_history_uses_first_gap() -> None:
    update = compute_revision_update(_row(), TODAY, "Revised")

    assert update.as_payload() == {
        "status": "Revised",
        "lastRevisedDate": "2024-01-10",
        "nextDueDate": "2024-01-11",
    }


def test_mark_revised_with_history_but_no_count_uses_second_gap() -> None:
    update = compute_revision_update(_row(status="Revised", last_revised="2024-01-05"), TODAY, "Revised")

    assert update.last_revised_date == "2024-01-10"
    assert update.next_due_date == "2024-01-13"


@pytest.mark.parametrize("count", ["0", "1", "2", "3", "4", "5", "42", "-7"])
def test_next_due_minus_last_revised_equals_gap(count: str) -> None:
    row = _row(last_revised="2024-01-01", count=count)
    update = compute_revision_update(row, TODAY, "Revised")

    last = date.fromisoformat(update.last_revised_date)
    nxt = date.fromisoformat(update.next_due_date)
    assert last == TODAY
    assert (nxt - last).days == gap_for(int(count))


def test_saturated_count_crosses_month_boundary() -> None:
    update = compute_revision_update(_row(count="9"), date(2024, 2, 15), "Revised")
    assert update.next_due_date == "2024-03-16"


def test_not_revised_clears_dates_and_is_idempotent() -> None:
    row = _row(status="Revised", last_revised="2024-01-05", studied="2024-01-01", count="2")

    first = compute_revision_update(row, TODAY, "Not Revised")
    second = compute_revision_update(row, TODAY + timedelta(days=3), "Not Revised")

    expected = {"status": "Not Revised", "lastRevisedDate": "", "nextDueDate": ""}
    assert first.as_payload() == expected
    assert second.as_payload() == expected


def test_revision_update_is_total_for_malformed_rows() -> None:
    update = compute_revision_update(parse_row([]), TODAY, "Revised")
    assert update.next_due_date == "2024-01-11"


@pytest.mark.parametrize(
    ("days", "due"),
    [(0, False), (1, True), (2, False), (3, True), (4, False), (7, True), (15, True), (30, True), (31, False), (60, False)],
)
def test_due_today_is_exact_day_membership(days: int, due: bool) -> None:
    assert is_due_today(_row(studied=_days_ago(days)), TODAY) is due


def test_due_today_ignores_last_revised_date() -> None:
    row = _row(status="Revised", last_revised=_days_ago(3), studied=_days_ago(5))
    assert is_due_today(row, TODAY) is False


def test_future_study_date_is_neither_due_nor_overdue() -> None:
    row = _row(studied=(TODAY + timedelta(days=3)).isoformat())
    assert days_since_studied(row, TODAY) == -3
    assert is_due_today(row, TODAY) is False
    assert is_overdue(row, TODAY) is False


def test_math_scenario_overdue_but_not_due() -> None:
    row = parse_row(["Math", "Algebra", "Not Revised", "", "", _days_ago(4)])
    assert is_due_today(row, TODAY) is False
    assert is_overdue(row, TODAY) is True


def test_bio_scenario_due_but_not_overdue() -> None:
    row = parse_row(["Bio", "Cells", "Not Revised", "", "", _days_ago(1)])
    assert is_due_today(row, TODAY) is True
    assert is_overdue(row, TODAY) is False


@pytest.mark.parametrize("days", [0, 1, 2, 5, 100])
def test_revised_rows_are_never_overdue(days: int) -> None:
    row = _row(status="Revised", last_revised="", studied=_days_ago(days))
    assert is_overdue(row, TODAY) is False


def test_overdue_requires_exact_not_revised_status() -> None:
    row = _row(status="", studied=_days_ago(10))
    assert is_overdue(row, TODAY) is False


@pytest.mark.parametrize(
    "studied", ["13/01/2024", "2024-1-5", "", "yesterday", " 2024-01-09", "2024-01-09 ", " 2024-01-06 "]
)
def test_malformed_study_date_is_excluded(studied: str) -> None:
    row = _row(studied=studied)
    assert is_due_today(row, TODAY) is False
    assert is_overdue(row, TODAY) is False


def test_padded_status_is_not_overdue() -> None:
    row = _row(status=" Not Revised ", studied=_days_ago(10))
    assert is_overdue(row, TODAY) is False


def test_out_of_range_study_date_rolls_over() -> None:
    # 2024-02-30 は 2024-03-01 として評価される
    row = _row(studied="2024-02-30")
    assert days_since_studied(row, date(2024, 3, 10)) == 9
    assert is_overdue(row, date(2024, 3, 10)) is True
    assert is_due_today(row, date(2024, 3, 4)) is True


def test_overdue_uses_any_interval_for_unordered_tables() -> None:
    table = (30, 15, 7)
    row = _row(studied=_days_ago(10))
    assert is_overdue(row, TODAY, table) is True
    assert is_overdue(_row(studied=_days_ago(5)), TODAY, table) is False
