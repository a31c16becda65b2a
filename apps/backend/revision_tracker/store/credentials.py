from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from ..logging import logger
from .common import StoreConfigurationError

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
DEFAULT_CLIENT_SECRET_PATH = "credentials/client_secret.json"
DEFAULT_TOKEN_PATH = "credentials/token.json"


def read_client_config(client_secret_path: str | Path) -> dict[str, Any]:
    """Return the `installed` (or `web`) block of an OAuth client secret file."""

    path = Path(client_secret_path)
    if not path.exists():
        raise StoreConfigurationError(f"OAuth client secret not found at {path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise StoreConfigurationError(f"OAuth client secret at {path} is not valid JSON") from exc
    block = payload.get("installed") or payload.get("web")
    if not isinstance(block, dict) or not block.get("client_id"):
        raise StoreConfigurationError(
            f"OAuth client secret at {path} has no 'installed' or 'web' client"
        )
    return block


def _authorized_user_info(
    token_payload: dict[str, Any], client_secret_path: str | Path | None
) -> dict[str, Any]:
    """Normalise a stored token into the authorized-user format google-auth expects.

    トークンに client_id/client_secret が無い場合（`access_token` 形式の古いトークン等）は
    クライアントシークレットファイルから補完する。
    """

    info = dict(token_payload)
    if "token" not in info and "access_token" in info:
        info["token"] = info["access_token"]
    if "expiry" not in info and isinstance(info.get("expiry_date"), (int, float)):
        expiry = datetime.fromtimestamp(info["expiry_date"] / 1000, tz=timezone.utc)
        info["expiry"] = expiry.strftime("%Y-%m-%dT%H:%M:%SZ")
    if not info.get("client_id") or not info.get("client_secret"):
        if client_secret_path is None:
            raise StoreConfigurationError(
                "OAuth token has no client_id/client_secret and no client secret file was given"
            )
        client = read_client_config(client_secret_path)
        info["client_id"] = info.get("client_id") or client.get("client_id")
        info["client_secret"] = info.get("client_secret") or client.get("client_secret")
        if client.get("token_uri"):
            info.setdefault("token_uri", client["token_uri"])
    return info


def load_credentials(
    token_path: str | Path,
    client_secret_path: str | Path | None = None,
    scopes: list[str] | None = None,
) -> Credentials:
    """認可済みユーザートークン（token.json）から Credentials を読み込む。

    - トークンファイルが無ければ StoreConfigurationError（起動時の致命エラー）
    - 無効でリフレッシュトークンがあれば更新し、ファイルへ書き戻す
    """

    path = Path(token_path)
    if not path.exists():
        raise StoreConfigurationError(
            f"OAuth token not found at {path}. Run scripts/get_token.py first."
        )
    try:
        token_payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise StoreConfigurationError(f"OAuth token at {path} is not valid JSON") from exc

    info = _authorized_user_info(token_payload, client_secret_path)
    try:
        creds = Credentials.from_authorized_user_info(info, scopes or SCOPES)
    except ValueError as exc:
        raise StoreConfigurationError(f"OAuth token at {path} is incomplete: {exc}") from exc
    if creds.valid:
        return creds

    if not creds.refresh_token:
        raise StoreConfigurationError(
            f"OAuth token at {path} is invalid and has no refresh token"
        )
    try:
        creds.refresh(Request())
    except RefreshError as exc:
        raise StoreConfigurationError(
            f"OAuth token at {path} could not be refreshed; run scripts/get_token.py again"
        ) from exc
    path.write_text(creds.to_json(), encoding="utf-8")
    logger.info("oauth_token_refreshed", path=str(path))
    return creds
