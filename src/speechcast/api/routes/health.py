"""Health check endpoints."""

from fastapi import APIRouter, Depends, Response

from speechcast import __version__
from speechcast.api.deps import get_content_provider
from speechcast.content.provider import ContentProvider
from speechcast.core.errors import ContentLoadError

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Basic health check."""
    return {
        "status": "healthy",
        "version": __version__,
    }


@router.get("/health/ready")
async def readiness_check(
    content: ContentProvider = Depends(get_content_provider),
):
    """Readiness probe: the content catalog must be loadable."""
    try:
        await content.load()
    except ContentLoadError:
        return Response(status_code=503, content="Content not ready")

    return {"status": "ready"}


@router.get("/health/live")
async def liveness_check() -> dict:
    """Liveness probe."""
    return {"status": "alive"}
