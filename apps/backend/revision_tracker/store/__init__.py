from __future__ import annotations

from typing import TYPE_CHECKING, Any

from googleapiclient.discovery import build

from .common import (
    HEADER_OFFSET,
    StoreConfigurationError,
    TopicStore,
    column_letter,
    sheet_row_number,
)
from .credentials import SCOPES, load_credentials, read_client_config
from .sheets import SheetsTopicStore

if TYPE_CHECKING:
    from ..config import Settings


def build_sheets_service(settings: Settings) -> Any:
    """sheets v4 の API クライアントを構築する。

    起動時に一度だけ呼び出し、得られたハンドルをアプリの寿命の間使い回す。
    """

    creds = load_credentials(
        settings.google_token_path,
        client_secret_path=settings.google_client_secret_path,
    )
    return build("sheets", "v4", credentials=creds, cache_discovery=False)


def create_store(settings: Settings) -> SheetsTopicStore:
    """設定からスプレッドシート用ストアを初期化する。"""

    if not settings.google_sheet_id:
        raise StoreConfigurationError("GOOGLE_SHEET_ID is not configured")
    service = build_sheets_service(settings)
    return SheetsTopicStore(
        service=service,
        spreadsheet_id=settings.google_sheet_id,
        sheet_name=settings.sheet_name,
    )


__all__ = [
    "HEADER_OFFSET",
    "SCOPES",
    "SheetsTopicStore",
    "StoreConfigurationError",
    "TopicStore",
    "build_sheets_service",
    "column_letter",
    "create_store",
    "load_credentials",
    "read_client_config",
    "sheet_row_number",
]
