# vsixforge/processors/base.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any

from vsixforge.content.files import FileEntry
from vsixforge.core.logging import getProcessorLogger
from vsixforge.manifest.model import Manifest

__all__ = ["Asset", "BaseProcessor"]



@dataclass(frozen=True, slots=True)
class Asset:
    type: str
    path: str



class BaseProcessor:
    """
    One stage of the content pipeline.

    `onFile` sees every included file (concurrently across files, in
    processor order within a file) and returns the file to pass on, either
    the same entry or a replacement. `onEnd` runs once, after every file has
    been through every processor.

    `assets` and `manifestContribution` are read after `onEnd` to render the
    package manifest.
    """
    name: str = "base"

    def __init__(self, manifest: Manifest, logger: logging.Logger | None = None):
        self.manifest = manifest
        self.logger = logger or getProcessorLogger(self.name)
        self.assets: list[Asset] = []
        self.manifestContribution: dict[str, Any] = {}

    async def onFile(self, file: FileEntry) -> FileEntry:
        return file

    async def onEnd(self) -> None:
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} assets={len(self.assets)}>"
