# vsixforge/processors/icon.py
from __future__ import annotations
import logging

from vsixforge.content.files import FileEntry
from vsixforge.core.errors import ProcessorError
from vsixforge.core.paths import normalizePath, toArchivePath
from vsixforge.manifest.model import Manifest
from .base import Asset, BaseProcessor

__all__ = ["IconProcessor"]


ICON_ASSET = "Microsoft.VisualStudio.Services.Icons.Default"



class IconProcessor(BaseProcessor):
    name = "icon"

    def __init__(self, manifest: Manifest, logger: logging.Logger | None = None):
        super().__init__(manifest, logger)
        self.icon: str | None = toArchivePath(manifest.icon) if manifest.icon else None
        self.didFindIcon = False
        self.manifestContribution["icon"] = None

    async def onFile(self, file: FileEntry) -> FileEntry:
        normalizedPath = normalizePath(file.path)
        if self.icon is not None and normalizedPath == self.icon:
            self.didFindIcon = True
            self.assets.append(Asset(type=ICON_ASSET, path=normalizedPath))
            self.manifestContribution["icon"] = self.icon
        return file

    async def onEnd(self) -> None:
        if self.icon and not self.didFindIcon:
            raise ProcessorError(f"The specified icon '{self.icon}' wasn't found in the extension.")
