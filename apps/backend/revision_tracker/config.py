from typing import Annotated
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources.types import NoDecode

from .store.credentials import DEFAULT_CLIENT_SECRET_PATH, DEFAULT_TOKEN_PATH


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    環境変数から読み込まれるアプリ設定クラス。
    - google_sheet_id: 学習トピックを保存するスプレッドシートID
    - google_client_secret_path / google_token_path: OAuth 資格情報ファイル
    - timezone: 「今日」を決めるタイムゾーン
    """

    environment: str = Field(
        default="development",
        description="Runtime environment / 実行環境",
    )
    google_sheet_id: str = Field(
        default="",
        description="Target spreadsheet ID / 対象スプレッドシートのID",
        validation_alias=AliasChoices("google_sheet_id", "sheet_id"),
    )
    sheet_name: str = Field(
        default="Sheet1",
        description="Worksheet name holding topic rows / トピック行を保持するシート名",
    )
    google_client_secret_path: str = Field(
        default=DEFAULT_CLIENT_SECRET_PATH,
        description="OAuth client secret JSON path / OAuth クライアントシークレットのパス",
    )
    google_token_path: str = Field(
        default=DEFAULT_TOKEN_PATH,
        description="Authorized user token JSON path / 認可済みトークンの保存先",
    )

    # --- 日付計算 ---
    timezone: str = Field(
        default="UTC",
        description="IANA timezone used to decide 'today' / 「今日」を決める IANA タイムゾーン",
    )

    # --- HTTP サーバ ---
    host: str = Field(default="127.0.0.1", description="Bind host / 待ち受けホスト")
    port: int = Field(default=8080, ge=1, le=65535, description="Bind port / 待ち受けポート")
    allowed_cors_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(),
        description=(
            "Comma separated CORS origins / CORS で許可するオリジンのカンマ区切り一覧"
        ),
        validation_alias=AliasChoices("allowed_cors_origins", "cors_allowed_origins"),
    )

    # --- 起動時検証 ---
    strict_mode: bool = Field(
        default=True,
        description="Refuse to start without a spreadsheet ID / シートID未設定なら起動を拒否",
    )

    # 未知のキーは無視し、環境変数名の大小文字は区別しない
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", case_sensitive=False)

    @field_validator("allowed_cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, raw: object) -> object:
        """`a, b,,a` のようなカンマ区切りを重複・空要素なしのタプルにする。"""

        if raw is None:
            return ()
        items = raw.split(",") if isinstance(raw, str) else raw
        if not isinstance(items, (list, tuple, set, frozenset)):
            return raw
        stripped = (item.strip() for item in items if isinstance(item, str))
        return tuple(dict.fromkeys(origin for origin in stripped if origin))

    @field_validator("google_sheet_id", "sheet_name", mode="after")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        return (value or "").strip()

    @field_validator("timezone", mode="after")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        """Reject unknown IANA timezone names at load time.

        `Asia/Tokyo` のような IANA 名のみ受け付ける。
        """

        name = (value or "").strip() or "UTC"
        try:
            ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"TIMEZONE must be a valid IANA timezone name: {name!r}") from exc
        return name

    @model_validator(mode="after")
    def _require_sheet_id_in_strict_mode(self) -> "Settings":
        """Fail fast when the target spreadsheet is not configured.

        strict_mode=true では GOOGLE_SHEET_ID 未設定のまま起動させない。
        """

        if self.strict_mode and not self.google_sheet_id:
            raise ValueError("GOOGLE_SHEET_ID must be set when STRICT_MODE=true")
        if not self.sheet_name:
            self.sheet_name = "Sheet1"
        return self


settings = Settings()
