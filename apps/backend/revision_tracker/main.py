from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
import uvicorn
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from .config import settings
from .logging import configure_logging, logger
from .middleware import AccessLogMiddleware, RequestIDMiddleware
from .routers import health, topics
from .store import TopicStore, create_store


@asynccontextmanager
async def _store_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Acquire the spreadsheet handle at startup and drop it at shutdown.

    資格情報やシートIDの不備はここで例外となり、起動そのものが失敗する。
    create_app(store=...) で注入済みの場合は接続せず、終了時もそのまま残す。
    """

    injected = getattr(app.state, "topic_store", None)
    if injected is None:
        store = await anyio.to_thread.run_sync(create_store, settings)
        app.state.topic_store = store
        logger.info(
            "topic_store_ready",
            spreadsheet_id=store.spreadsheet_id,
            sheet_name=settings.sheet_name,
        )
    try:
        yield
    finally:
        app.state.topic_store = injected


def create_app(store: TopicStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    `store` を渡した場合はそれを使い、省略時は起動時に Google Sheets へ接続する。
    """
    configure_logging()
    app = FastAPI(
        title="Topic Revision Tracker API",
        version="0.1.0",
        lifespan=_store_lifespan,
    )
    app.state.topic_store = store

    configured_origins = list(settings.allowed_cors_origins)
    allow_credentials = bool(configured_origins)
    if not configured_origins:
        configured_origins = ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=configured_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Starlette では後から追加したミドルウェアが外側で実行される。
    # RequestID を外側に置き、AccessLog が採番済みの request_id を参照できるようにする。
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(health.router)
    app.include_router(topics.router, prefix="/api")

    return app


app = create_app()


def run() -> None:
    """Serve the API with uvicorn on the configured host/port."""
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
