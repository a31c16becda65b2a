#!/usr/bin/env python
"""Google Sheets 用の OAuth トークンを取得し credentials/token.json へ保存するユーティリティ。"""

from __future__ import annotations

import sys
from pathlib import Path


def main() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    backend_root = repo_root / "apps" / "backend"
    sys.path.insert(0, str(backend_root))

    from revision_tracker.auth_token import main as run_token_flow

    run_token_flow(sys.argv[1:])


if __name__ == "__main__":
    main()
