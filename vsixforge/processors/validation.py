# vsixforge/processors/validation.py
from __future__ import annotations
import logging
import threading

from vsixforge.content.files import FileEntry
from vsixforge.core.errors import ProcessorError
from vsixforge.manifest.model import Manifest
from .base import BaseProcessor

__all__ = ["ValidationProcessor"]



class ValidationProcessor(BaseProcessor):
    """Fails when two archive paths differ only by case."""
    name = "validation"

    def __init__(self, manifest: Manifest, logger: logging.Logger | None = None):
        super().__init__(manifest, logger)
        self._lock = threading.Lock()
        # lowercase path -> paths seen, in arrival order
        self.files: dict[str, list[str]] = {}
        self.duplicates: dict[str, None] = {}

    async def onFile(self, file: FileEntry) -> FileEntry:
        lower = file.path.lower()
        with self._lock:
            existing = self.files.get(lower)
            if existing is not None:
                existing.append(file.path)
                self.duplicates[lower] = None
            else:
                self.files[lower] = [file.path]
        return file

    async def onEnd(self) -> None:
        with self._lock:
            if not self.duplicates:
                return

            messages = [
                "The following files have the same case insensitive path, "
                "which isn't supported by the VSIX format:"
            ]
            for lower in self.duplicates:
                messages.extend(f"  - {path}" for path in self.files[lower])

        raise ProcessorError("\n".join(messages))
