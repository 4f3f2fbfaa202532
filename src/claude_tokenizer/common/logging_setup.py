"""Central logging setup for the gateway and the CLI."""
from __future__ import annotations
import logging
import sys
from typing import TextIO

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"

# SDK and HTTP client loggers that report every request
_CHATTY_LOGGERS = ("httpx", "httpcore", "anthropic", "google_genai")


def _to_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: int | str = logging.INFO, stream: TextIO | None = None) -> None:
    """
    Configure root logger with sane defaults.

    Args:
        level: Logging level, numeric or a name such as "debug".
        stream: Destination; stdout unless given (the CLI logs to stderr).
    """
    numeric = _to_level(level)
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric, logging.WARNING))
