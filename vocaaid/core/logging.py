import logging
import os
from typing import Any, Optional


DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Chatty third-party loggers that only matter when debugging transport issues
QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite")


class ContextFilter(logging.Filter):
    """Fills session/word context fields so custom formats never hit KeyError."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        for attr in ("session_id", "word_id"):
            if not hasattr(record, attr):
                setattr(record, attr, "-")
        return True


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Initialize the root logger with one stream handler and the context filter."""
    resolved_level = getattr(logging, (level or DEFAULT_LEVEL), logging.INFO)

    root = logging.getLogger()
    root.setLevel(resolved_level)

    # Uvicorn reloads re-import the app; drop previous handlers first
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    handler.addFilter(ContextFilter())
    root.addHandler(handler)

    if resolved_level > logging.DEBUG:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger; ensure root is initialized."""
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)


def bind(logger: logging.Logger, **context: Any) -> logging.LoggerAdapter:
    """Return an adapter that stamps every record with ``context``."""
    return logging.LoggerAdapter(logger, context)
