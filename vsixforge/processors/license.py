# vsixforge/processors/license.py
from __future__ import annotations
import dataclasses
import logging
import posixpath
import re

from vsixforge.content.files import FileEntry
from vsixforge.core.paths import normalizePath
from vsixforge.manifest.model import Manifest
from .base import Asset, BaseProcessor

__all__ = ["LicenseProcessor"]


LICENSE_ASSET = "Microsoft.VisualStudio.Services.Content.License"

_SEE_LICENSE_RE = re.compile(r"^SEE LICENSE IN (.*)$")
_DEFAULT_LICENSE_RE = re.compile(r"^extension/license(\.(md|txt))?$", re.IGNORECASE)



class LicenseProcessor(BaseProcessor):
    """Picks the first license file; extensionless ones get a `.txt` suffix."""
    name = "license"

    def __init__(self, manifest: Manifest, logger: logging.Logger | None = None):
        super().__init__(manifest, logger)
        self.didFindLicense = False

        mtch = _SEE_LICENSE_RE.match(manifest.license or "")
        if mtch and mtch.group(1):
            self.pathPattern = re.compile("^extension/" + re.escape(mtch.group(1)) + "$")
        else:
            self.pathPattern = _DEFAULT_LICENSE_RE

        self.manifestContribution["license"] = None

    async def onFile(self, file: FileEntry) -> FileEntry:
        if self.didFindLicense:
            return file

        normalizedPath = normalizePath(file.path)
        if not self.pathPattern.match(normalizedPath):
            return file

        if not posixpath.splitext(normalizedPath)[1]:
            normalizedPath += ".txt"
            file = dataclasses.replace(file, path=file.path + ".txt")

        self.assets.append(Asset(type=LICENSE_ASSET, path=normalizedPath))
        self.manifestContribution["license"] = normalizedPath
        self.didFindLicense = True
        return file
