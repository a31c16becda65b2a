from __future__ import annotations

from datetime import date

from fastapi import HTTPException, Request

from . import clock
from .flows import TopicFlow
from .store import TopicStore


def get_topic_store(request: Request) -> TopicStore:
    """起動時に確保したストアを app.state から取り出す。"""

    store = getattr(request.app.state, "topic_store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="topic store is not initialised")
    return store


def get_topic_flow(request: Request) -> TopicFlow:
    return TopicFlow(get_topic_store(request))


def get_today() -> date:
    """「今日」の暦日。テストでは dependency_overrides で固定する。"""

    return clock.today()
