"""FastAPI application: routers, middleware and lifespan."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.responses import JSONResponse

from src.songsync.api.http.app_data import ApplicationDependencies
from src.songsync.api.http.routers.auth import router_auth
from src.songsync.api.http.routers.health import router_health
from src.songsync.api.http.routers.proxy import router_proxy
from src.songsync.api.utils.app_startup import configure_logging
from src.songsync.core.services import (
    AuthSessionService,
    LyricsService,
    MusixmatchClient,
    NowPlayingService,
    OAuthClientService,
    UserSessionService,
)
from src.songsync.core.storage import RedisSessionStorage
from src.songsync.core.storage.session_storage import get_session_storage
from src.songsync.runtime.context import get_config

configure_logging()

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup()
    try:
        yield
    finally:
        await shutdown()


_config = get_config()
_in_production = _config.app.environment == "production"

# Browsers refuse credentialed CORS with a wildcard origin anyway
if _in_production and "*" in _config.app.cors.origins:
    raise RuntimeError("CORS origins must be listed explicitly in production")

app = FastAPI(
    title="songsync",
    lifespan=lifespan,
    docs_url=None if _in_production else "/docs",
    redoc_url=None if _in_production else "/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_config.app.cors.origins,
    allow_credentials=_config.app.cors.allow_credentials,
    allow_methods=_config.app.cors.allow_methods,
    allow_headers=_config.app.cors.allow_headers,
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Tag every log line of a request with its id and log one line per response.

    Only the path is bound: the callback query string holds the authorization
    code, and lyrics queries are user input.
    """
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    started = time.perf_counter()

    with logger.contextualize(
        request_id=request_id, method=request.method, path=request.url.path
    ):
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error")
            response = JSONResponse(
                status_code=500,
                content={"detail": "Internal Server Error", "request_id": request_id},
            )

        logger.bind(
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        ).info("{} {} -> {}", request.method, request.url.path, response.status_code)

    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    if get_config().app.environment == "production":
        response.headers.setdefault(
            "Strict-Transport-Security", "max-age=31536000; includeSubDomains"
        )
    response.headers["X-Request-ID"] = request_id
    return response


app.include_router(router_auth)
app.include_router(router_proxy)
app.include_router(router_health)


async def startup() -> None:
    config = get_config()
    logger.info("Starting songsync ({})", config.app.environment)

    session_storage = await get_session_storage()

    app.state.app_dependencies = ApplicationDependencies(
        session_storage=session_storage,
        oauth_client_service=OAuthClientService(),
        user_session_service=UserSessionService(session_storage),
        auth_session_service=AuthSessionService(session_storage),
        now_playing_service=NowPlayingService(),
        lyrics_service=LyricsService(MusixmatchClient.from_config()),
    )


async def shutdown() -> None:
    logger.info("Shutting down songsync")
    app_dependencies: ApplicationDependencies = app.state.app_dependencies
    await app_dependencies.session_storage.cleanup_expired()
    if isinstance(app_dependencies.session_storage, RedisSessionStorage):
        await app_dependencies.session_storage.close()


if __name__ == "__main__":
    import uvicorn

    from src.songsync.runtime.settings import EnvironmentVariables

    env = EnvironmentVariables()
    uvicorn.run(
        app,
        host=env.host or get_config().app.host,
        port=env.port or get_config().app.port,
        access_log=False,
    )
