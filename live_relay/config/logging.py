"""Logging configuration constants."""

from __future__ import annotations

import os

LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
LOG_FORMAT = (os.getenv("LOG_FORMAT") or "%(asctime)s %(levelname)s %(name)s: %(message)s").strip()

ENV_SHOW_WEBSOCKETS_LOGS = "SHOW_WEBSOCKETS_LOGS"
QUIET_LOGGERS: tuple[str, ...] = ("websockets", "websockets.client")

__all__ = ["ENV_SHOW_WEBSOCKETS_LOGS", "LOG_FORMAT", "LOG_LEVEL", "QUIET_LOGGERS"]
