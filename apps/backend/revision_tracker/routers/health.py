from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..metrics import registry

router = APIRouter()


@router.get("/")
def root() -> dict[str, str]:
    """Plain liveness message at the site root."""
    return {"message": "Topic revision tracker is running"}


@router.get("/healthz")
def health_check() -> dict[str, str]:
    """Simple health check endpoint.

    ライブネス/レディネス確認用の簡易エンドポイント。
    """
    return {"status": "ok"}


@router.get("/metrics")
def metrics() -> JSONResponse:
    """Return in-memory metrics snapshot.

    p50/p95/エラー/件数をパス別に返す簡易メトリクス。
    """
    return JSONResponse(content={"paths": registry.snapshot()})
