"""Pytest configuration shared by backend tests."""

import os
import sys
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
for _path in (_PROJECT_ROOT, _PROJECT_ROOT / "apps" / "backend"):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))

# 設定クラスは import 時に GOOGLE_SHEET_ID を必須とするため、テスト用の値を先に与える。
# 実運用では `.env` で対象スプレッドシートの ID を設定すること。
os.environ.setdefault("GOOGLE_SHEET_ID", "test-sheet-id")
os.environ.setdefault("TIMEZONE", "UTC")
