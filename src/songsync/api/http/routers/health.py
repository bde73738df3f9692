"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from src.songsync.api.http.deps import get_session_storage
from src.songsync.core.storage import RedisSessionStorage, SessionStorage
from src.songsync.runtime.context import get_config

router_health = APIRouter(prefix="/health", tags=["health"])


@router_health.get("")
async def health() -> dict[str, str]:
    """Liveness check: 200 as long as the process is running."""
    return {"status": "healthy", "service": "songsync"}


@router_health.get("/ready", response_model=None)
async def readiness(
    storage: SessionStorage = Depends(get_session_storage),
) -> dict[str, Any] | JSONResponse:
    """Readiness check: 503 when the session store cannot be used.

    A configured but unreachable Redis only fails readiness in production;
    elsewhere the in-memory fallback is reported as degraded.
    """
    config = get_config()

    if isinstance(storage, RedisSessionStorage):
        healthy = await storage.ping()
        checks = {
            "session_storage": {
                "status": "healthy" if healthy else "unhealthy",
                "type": "redis",
            }
        }
    else:
        healthy = storage.is_available()
        checks = {
            "session_storage": {
                "status": "degraded" if config.redis.enabled else "healthy",
                "type": "in-memory",
            }
        }
        if config.redis.enabled and config.app.environment == "production":
            healthy = False

    body = {"status": "ready" if healthy else "not_ready", "checks": checks}
    if not healthy:
        return JSONResponse(status_code=503, content=body)
    return body
