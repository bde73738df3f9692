import logging
import re
import sys
from pathlib import Path

from loguru import logger

from src.songsync.runtime.context import get_config

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "[<cyan>{extra[request_id]}</cyan>] | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Credentials that can show up in upstream URLs, headers and token payloads
_SECRETS = (
    (re.compile(r"\b(apikey|code|client_secret|access_token|refresh_token)=[^&\s'\"]+"), r"\1=***"),
    (re.compile(r"'?\"?(access_token|refresh_token)\"?'?\s*:\s*['\"][^'\"]+['\"]"), r"\1: ***"),
    (re.compile(r"\b(Bearer|Basic) [A-Za-z0-9._~+/=-]+"), r"\1 ***"),
)


def redact_secrets(record) -> bool:
    """Sink filter that masks Spotify tokens, OAuth codes and the Musixmatch key.

    Runs as a filter rather than a patcher so it sees the formatted message.
    """
    message = record["message"]
    for pattern, replacement in _SECRETS:
        message = pattern.sub(replacement, message)
    record["message"] = message
    return True


class InterceptHandler(logging.Handler):
    """Redirect standard 'logging' records to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Request logging middleware already covers access logs
        if record.name == "uvicorn.access":
            return

        # httpx logs full request URLs at INFO, and Musixmatch URLs carry the API key
        if record.name.startswith(("httpx", "httpcore")) and record.levelno < logging.WARNING:
            return

        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(depth=2, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def configure_logging() -> None:
    main_config = get_config()
    cfg = main_config.logging
    env = main_config.app.environment

    logger.remove()
    logger.configure(extra={"request_id": "-"})

    debug_tracebacks = env != "production"

    # Console: always colorized, human-readable
    logger.add(
        sys.stderr,
        level=cfg.level,
        format=CONSOLE_FORMAT,
        colorize=True,
        filter=redact_secrets,
        backtrace=debug_tracebacks,
        diagnose=debug_tracebacks,
    )

    # File: JSON or plain
    if cfg.file:
        is_json_file = cfg.format == "json"
        path = Path(cfg.file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(path),
            level=cfg.level,
            format="{message}" if is_json_file else CONSOLE_FORMAT,
            serialize=is_json_file,
            filter=redact_secrets,
            rotation=f"{cfg.max_size_mb} MB",
            retention=cfg.backup_count,
            compression="zip",
            enqueue=True,
            backtrace=debug_tracebacks,
            diagnose=debug_tracebacks,
        )

    # Route stdlib logging (uvicorn, httpx, redis) through Loguru
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in list(logging.root.manager.loggerDict.keys()):
        stdlog = logging.getLogger(name)
        stdlog.handlers = []
        stdlog.propagate = True

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.CRITICAL)

    logger.info(
        "Logging configured",
        app_level=cfg.level,
        app_format=cfg.format,
        app_file=cfg.file,
        environment=env,
    )
