"""Logging setup shared by the command line and the HTTP server."""

from __future__ import annotations

import logging
import sys

from mdd.config import MDD_LOG_LEVEL

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class _ExtraFormatter(logging.Formatter):
    """Append ``extra={...}`` fields to the rendered message."""

    _RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()) | {
        "message",
        "asctime",
    }

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in self._RESERVED and not key.startswith("_")
        }
        if not extras:
            return base
        rendered = " ".join(f"{key}={value!r}" for key, value in sorted(extras.items()))
        return f"{base} [{rendered}]"


def configure_logging(level: str | None = None) -> None:
    """Install a stderr handler on the ``mdd`` and ``server`` loggers.

    Args:
        level: Log level name. Defaults to ``MDD_LOG_LEVEL``.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_ExtraFormatter(_LOG_FORMAT))
    resolved = getattr(logging, (level or MDD_LOG_LEVEL).upper(), logging.WARNING)
    for name in ("mdd", "server"):
        package_logger = logging.getLogger(name)
        package_logger.handlers = [handler]
        package_logger.setLevel(resolved)
        package_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a module logger."""
    return logging.getLogger(name)
