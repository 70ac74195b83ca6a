# vsixforge/core/logging/__init__.py
from __future__ import annotations

from .context import setLogContext, clearLogContext, getLogContext
from .setup import configureLogging
from .util import getProcessorLogger

__all__ = [
    "configureLogging",
    "getProcessorLogger",
    "setLogContext",
    "clearLogContext",
    "getLogContext",
]
