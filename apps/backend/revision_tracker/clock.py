from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from .config import settings


def today(timezone: str | None = None) -> date:
    """Return the current calendar date in the configured timezone.

    日付計算は時刻を持たない暦日で行うため、ここで一度だけ「今日」を確定させる。
    """

    return datetime.now(ZoneInfo(timezone or settings.timezone)).date()
