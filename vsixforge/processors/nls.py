# vsixforge/processors/nls.py
from __future__ import annotations
import logging
import re

from vsixforge.content.files import FileEntry
from vsixforge.core.paths import normalizePath, toArchivePath
from vsixforge.manifest.model import Manifest
from .base import Asset, BaseProcessor

__all__ = ["NLSProcessor"]


TRANSLATION_ASSET_PREFIX = "Microsoft.VisualStudio.Code.Translation."

_LEADING_DOT_SLASH_RE = re.compile(r"^\.[/\\]")



class NLSProcessor(BaseProcessor):
    """Registers the `vscode` translation files of a language pack as assets."""
    name = "nls"

    def __init__(self, manifest: Manifest, logger: logging.Logger | None = None):
        super().__init__(manifest, logger)

        # LANGUAGE -> archive path; the last declaration for a language wins
        byLanguage: dict[str, str] = {}
        for localization in manifest.localizations():
            for translation in localization.translations:
                if translation.id == "vscode" and translation.path:
                    translationPath = normalizePath(_LEADING_DOT_SLASH_RE.sub("", translation.path))
                    byLanguage[localization.languageId.upper()] = toArchivePath(translationPath)

        # archive path -> LANGUAGE
        self.translations: dict[str, str] = {path: language for language, path in byLanguage.items()}

    async def onFile(self, file: FileEntry) -> FileEntry:
        normalizedPath = normalizePath(file.path)
        language = self.translations.get(normalizedPath)
        if language:
            self.assets.append(Asset(type=f"{TRANSLATION_ASSET_PREFIX}{language}", path=normalizedPath))
        return file
