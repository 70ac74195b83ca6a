# vsixforge/core/logging/util.py
from __future__ import annotations

import logging



def getProcessorLogger(processorName: str) -> logging.Logger:
    return logging.getLogger(f"vsixforge.processors.{processorName}")
