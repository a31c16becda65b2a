from __future__ import annotations

from datetime import date
from functools import partial
from typing import Any, Callable, TypeVar

import anyio  # オフロード用
from fastapi import APIRouter, Depends, HTTPException
from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError
from httplib2 import HttpLib2Error

from ..dependencies import get_today, get_topic_flow
from ..flows import TopicFlow, TopicNotFoundError
from ..logging import logger
from ..models.topic import (
    AddTopicRequest,
    AddTopicResponse,
    UpdateStatusRequest,
    UpdateStatusResponse,
)
from ..store import StoreConfigurationError

router = APIRouter(tags=["topics"])

T = TypeVar("T")

# スプレッドシート I/O 由来の失敗。リトライせず 500 として返す。
_STORE_ERRORS = (
    HttpError,
    HttpLib2Error,
    GoogleAuthError,
    StoreConfigurationError,
    OSError,
)


async def _call_store(operation: str, message: str, func: Callable[..., T], *args: Any) -> T:
    """Run a blocking flow call in a worker thread, mapping store failures to 500."""

    try:
        return await anyio.to_thread.run_sync(partial(func, *args))
    except _STORE_ERRORS as exc:
        logger.error(
            "topics_store_failed",
            operation=operation,
            error_type=exc.__class__.__name__,
            error=str(exc)[:200],
        )
        raise HTTPException(
            status_code=500,
            detail={"success": False, "error": message, "reason_code": "STORE_FAILURE"},
        ) from exc


@router.get("/topics", summary="全トピック行を取得")
async def list_topics(flow: TopicFlow = Depends(get_topic_flow)) -> list[list[str]]:
    """Return every topic row as stored (header excluded)."""
    rows = await _call_store("list_topics", "Failed to fetch topics", flow.list_topics)
    return [row.to_cells() for row in rows]


@router.get("/due-today", summary="本日が復習日のトピック")
async def list_due_today(
    flow: TopicFlow = Depends(get_topic_flow),
    today: date = Depends(get_today),
) -> list[list[str]]:
    """Rows whose days since study equal 1, 3, 7, 15 or 30."""
    rows = await _call_store(
        "list_due_today", "Failed to fetch due topics", flow.list_due_today, today
    )
    return [row.to_cells() for row in rows]


@router.get("/overdue", summary="復習期限切れのトピック")
async def list_overdue(
    flow: TopicFlow = Depends(get_topic_flow),
    today: date = Depends(get_today),
) -> list[list[str]]:
    """Not-revised rows that have passed at least one revision milestone."""
    rows = await _call_store(
        "list_overdue", "Failed to fetch overdue topics", flow.list_overdue, today
    )
    return [row.to_cells() for row in rows]


@router.post(
    "/update-status",
    response_model=UpdateStatusResponse,
    summary="復習状態を更新して次回期日を再計算",
)
async def update_status(
    req: UpdateStatusRequest,
    flow: TopicFlow = Depends(get_topic_flow),
    today: date = Depends(get_today),
) -> UpdateStatusResponse:
    """Mark a row Revised / Not Revised and write C, D and G back to the sheet."""
    try:
        update = await _call_store(
            "update_status",
            "Failed to update revision info",
            flow.mark_status,
            req.row_index,
            req.new_status.value,
            today,
        )
    except TopicNotFoundError as exc:
        raise HTTPException(
            status_code=404,
            detail={"success": False, "error": str(exc), "reason_code": "TOPIC_NOT_FOUND"},
        ) from exc
    return UpdateStatusResponse.model_validate(update.as_payload())


@router.post("/add-topic", response_model=AddTopicResponse, summary="トピックを追加")
async def add_topic(
    req: AddTopicRequest,
    flow: TopicFlow = Depends(get_topic_flow),
) -> AddTopicResponse:
    """Append a new row with status "Not Revised"."""
    row = await _call_store(
        "add_topic",
        "Error adding topic",
        flow.add_topic,
        req.subject,
        req.topic,
        req.notes,
        req.date_studied,
    )
    return AddTopicResponse(row=row)
