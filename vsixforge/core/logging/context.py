# vsixforge/core/logging/context.py
from __future__ import annotations
import contextvars
from typing import Any

__all__ = ["setLogContext", "clearLogContext", "getLogContext"]


# Per-run values (projectRoot, phase) attached to every record of the run
_logContextVar: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar(
    "vsixforge.logctx", default=None
)



def setLogContext(**values: Any) -> None:
    """Merge `values` into the current context; None values are skipped."""
    merged = dict(_logContextVar.get() or {})
    merged.update({key: value for key, value in values.items() if value is not None})
    _logContextVar.set(merged)



def clearLogContext() -> None:
    _logContextVar.set(None)



def getLogContext() -> dict[str, Any] | None:
    return _logContextVar.get()
