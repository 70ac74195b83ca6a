# vsixforge/core/logging/formatters.py
from __future__ import annotations

import logging

from vsixforge.core.jsonutils import safeJsonDumps
from .context import getLogContext

__all__ = ["JsonFormatter", "DevFormatter"]


# Context keys shown on console lines, in this order
_CONSOLE_CONTEXT_KEYS = ("projectRoot", "phase")



class JsonFormatter(logging.Formatter):
    """One-line JSON records for log files."""
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "ts": int(record.created * 1000),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
            "ctx": getLogContext() or {},
        }
        if record.exc_info and record.exc_info[1] is not None:
            err = record.exc_info[1]
            payload["exc"] = {
                "type": type(err).__name__,
                "message": str(err),
                "stack": self.formatException(record.exc_info),
            }
        return safeJsonDumps(payload)



class DevFormatter(logging.Formatter):
    """`LEVEL: [logger] message [projectRoot/phase]` for the console."""
    def format(self, record: logging.LogRecord) -> str:
        ctx = getLogContext() or {}
        shown = [str(ctx[key]) for key in _CONSOLE_CONTEXT_KEYS if ctx.get(key)]
        suffix = f" [{'/'.join(shown)}]" if shown else ""

        msg = record.getMessage()
        if record.exc_info:
            msg += "\n" + self.formatException(record.exc_info)
        if record.stack_info:
            msg += "\n" + self.formatStack(record.stack_info)
        return f"{record.levelname}: [{record.name}] {msg}{suffix}"
