# vsixforge/core/logging/setup.py
from __future__ import annotations
import logging
import logging.handlers

from vsixforge.app.settings import settings, settingsBool
from .formatters import DevFormatter, JsonFormatter

__all__ = ["QUIET_LOGGERS", "configureLogging"]


# Third-party loggers kept at WARNING even in dev mode
QUIET_LOGGERS = ("asyncio", "markdown_it")

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5



def _fileHandler(logFile: str, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        logFile,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter())
    return handler



def configureLogging(*, devMode: bool | None = None) -> None:
    """
    Replace the root handlers for a CLI run.

    The console always gets `DevFormatter` lines; `logging.file` adds a
    rotating JSON log. Dev mode (`--verbose` or `logging.devMode`) logs DEBUG,
    otherwise INFO.
    """
    if devMode is None:
        devMode = settingsBool("logging.devMode", False)
    level = logging.DEBUG if devMode else logging.INFO

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(DevFormatter())
    root.addHandler(console)

    logFile = settings("logging.file")
    if logFile:
        root.addHandler(_fileHandler(str(logFile), level))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
