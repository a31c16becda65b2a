import io
import json
from contextlib import redirect_stderr
from datetime import date

from fastapi.testclient import TestClient

from revision_tracker.dependencies import get_today
from revision_tracker.store import SheetsTopicStore
from tests.sheets_fakes import FakeSheetsService


def _json_lines(buffer_text: str) -> list[dict]:
    """Parse every JSON log line from captured stderr, ignoring anything else."""

    parsed: list[dict] = []
    for line in buffer_text.splitlines():
        line = line.strip()
        if not line.startswith("{"):
            continue
        try:
            parsed.append(json.loads(line))
        except json.JSONDecodeError:
            continue
    return parsed


def test_request_complete_is_a_single_json_line():
    buf = io.StringIO()
    # configure_logging() は StreamHandler を生成時点の stderr に結び付けるため、
    # リダイレクト中にアプリを組み立てる。
    with redirect_stderr(buf):
        from revision_tracker.main import create_app

        app = create_app(
            store=SheetsTopicStore(
                service=FakeSheetsService(rows=[["Math", "Algebra", "Not Revised", "", "", "2024-01-09"]]),
                spreadsheet_id="sheet-123",
            )
        )
        app.dependency_overrides[get_today] = lambda: date(2024, 1, 10)
        client = TestClient(app)
        resp = client.get("/api/due-today", headers={"X-Request-ID": "req-42"})
        assert resp.status_code == 200

    entries = _json_lines(buf.getvalue())
    completes = [e for e in entries if e.get("event") == "request_complete"]
    assert len(completes) == 1
    entry = completes[0]
    assert entry["path"] == "/api/due-today"
    assert entry["method"] == "GET"
    assert entry["status_code"] == 200
    assert entry["request_id"] == "req-42"
    assert entry["level"] == "info"
    assert "timestamp" in entry
    assert isinstance(entry["latency_ms"], (int, float))

    listed = [e for e in entries if e.get("event") == "due_today_listed"]
    assert listed and listed[0]["count"] == 1
    assert listed[0]["request_id"] == "req-42"


def test_secret_like_keys_are_masked():
    buf = io.StringIO()
    with redirect_stderr(buf):
        from revision_tracker.logging import configure_logging, logger

        configure_logging()
        logger.info(
            "oauth_debug",
            access_token="ya29.very-long-access-token-value",
            refresh_token="short",
            credentials={"client_secret": "abcdefghijklmnop", "client_id": "visible-id"},
            subject="Math",
        )

    entry = next(e for e in _json_lines(buf.getvalue()) if e.get("event") == "oauth_debug")
    assert entry["access_token"] == "ya29…alue"
    assert entry["refresh_token"] == "***"
    assert entry["credentials"]["client_secret"] == "abcd…mnop"
    assert entry["credentials"]["client_id"] == "visible-id"
    assert entry["subject"] == "Math"
