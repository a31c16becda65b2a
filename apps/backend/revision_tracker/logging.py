"""Structured JSON logging for the tracker.

stdlib logging をメッセージのみの出力に揃え、structlog で 1 イベント 1 行の
JSON を出す。OAuth のアクセストークンやクライアントシークレットは
レンダリング前に `SecretMasker` で伏せる。
"""

from typing import Any, Iterable

import logging
import structlog
from structlog import contextvars as structlog_contextvars


DEFAULT_SENSITIVE_FRAGMENTS = (
    "token",
    "secret",
    "authorization",
    "password",
    "api_key",
    "refresh",
)


class SecretMasker:
    """structlog processor that hides values stored under secret-looking keys.

    8 文字以下の値は `***`、それより長い値は先頭と末尾 4 文字だけを残す。
    dict / list / tuple の中も辿る。`event` キーは対象外。
    """

    placeholder = "***"
    visible = 4

    def __init__(self, fragments: Iterable[str] = DEFAULT_SENSITIVE_FRAGMENTS) -> None:
        self._fragments = tuple(fragment.lower() for fragment in fragments)

    def __call__(
        self,
        logger: structlog.types.WrappedLogger,
        method_name: str,
        event_dict: dict[str, Any],
    ) -> dict[str, Any]:
        for key in list(event_dict):
            if key == "event":
                continue
            event_dict[key] = self._walk(event_dict[key], str(key))
        return event_dict

    def is_sensitive(self, key: str) -> bool:
        lowered = key.lower()
        return any(fragment in lowered for fragment in self._fragments)

    def mask(self, raw: object) -> str:
        text = "" if raw is None else str(raw).strip()
        if len(text) <= self.visible * 2:
            return self.placeholder
        return f"{text[:self.visible]}…{text[-self.visible:]}"

    def _walk(self, value: Any, key: str) -> Any:
        if isinstance(value, dict):
            return {k: self._walk(v, str(k)) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._walk(item, key) for item in value]
        if self.is_sensitive(key):
            return self.mask(value)
        return value


def configure_logging(level: int = logging.INFO) -> None:
    """Configure stdlib logging and structlog for JSON output.

    Safe to call more than once; the last call wins.
    """
    # force=True: uvicorn などが先に付けたハンドラを置き換える
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[logging.StreamHandler()],
        force=True,
    )
    structlog.configure(
        processors=[
            structlog_contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            SecretMasker(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


logger = structlog.get_logger()
