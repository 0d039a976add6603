"""Logging for the commerce core.

stdlib logging owns the handlers (console plus rotating files); structlog
turns the key/value events the modules emit into JSON in deployed
environments and into rich console output everywhere else. The HTTP app
factory calls ``configure_logging`` once; tests leave logging unconfigured.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

import structlog

from commerce.utils.settings import environment

DEPLOYED = frozenset({"production", "staging"})

_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

_MAX_BYTES = 10 * 1024 * 1024
_BACKUPS = 5


def log_level() -> str:
    """``LOG_LEVEL`` if set, otherwise the level for the current environment."""
    return os.getenv("LOG_LEVEL", _LEVELS.get(environment(), "INFO")).upper()


def quiet_framework_loggers() -> None:
    for name in ("protean", "urllib3", "asyncio"):
        logging.getLogger(name).setLevel(logging.WARNING)


def _rotating(path: Path, level: int | str) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path, maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(level)
    return handler


def _install_handlers(log_dir: Path, level: str) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [
        console,
        _rotating(log_dir / "commerce.log", level),
        _rotating(log_dir / "commerce_error.log", logging.ERROR),
    ]


def _renderer(env: str):
    if env in DEPLOYED:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=2),
    )


def _configure_structlog(env: str) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _renderer(env),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(log_dir: str | Path = "logs") -> None:
    """Install handlers under ``log_dir`` and route structlog through them."""
    _install_handlers(Path(log_dir), log_level())
    quiet_framework_loggers()
    _configure_structlog(environment())
