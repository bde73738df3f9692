import logging

from loguru import logger

from src.songsync.api.utils.app_startup import InterceptHandler, redact_secrets


def _record(name: str, level: int, message: str) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, message, None, None)


def test_intercept_handler_forwards_and_filters():
    messages = []
    sink_id = logger.add(messages.append, format="{message}", level="DEBUG")
    try:
        handler = InterceptHandler()
        handler.emit(_record("httpx", logging.INFO, "GET https://api.example.com/?apikey=k"))
        handler.emit(_record("uvicorn.access", logging.INFO, "GET /health 200"))
        handler.emit(_record("redis", logging.WARNING, "redis is slow"))
    finally:
        logger.remove(sink_id)

    assert [str(message).strip() for message in messages] == ["redis is slow"]


def test_secrets_are_masked():
    messages = []
    sink_id = logger.add(messages.append, format="{message}", filter=redact_secrets)
    try:
        logger.warning(
            "Lookup failed for {}",
            "https://api.musixmatch.com/ws/1.1/track.search?q_track=Jeremy&apikey=mxm-123",
        )
        logger.warning("Callback /auth/callback?code=abc123&state=s1")
        logger.warning("Authorization: Bearer access-abc")
        logger.warning('Token body {"access_token": "access-abc", "refresh_token": "refresh-abc"}')
    finally:
        logger.remove(sink_id)

    text = "".join(str(message) for message in messages)
    for secret in ("mxm-123", "abc123", "access-abc", "refresh-abc"):
        assert secret not in text
    assert "q_track=Jeremy" in text
    assert "state=s1" in text
