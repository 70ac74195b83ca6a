# vsixforge/processors/manifest.py
from __future__ import annotations
import logging
import re
from typing import Any

from vsixforge.core import console
from vsixforge.core.errors import ProcessorError
from vsixforge.manifest.model import Manifest
from vsixforge.manifest.urls import getRepositoryUrl, getUrl, isGitHubRepository
from .base import BaseProcessor

__all__ = ["ManifestProcessor"]


_EXTENSION_KIND_DOCS = "https://aka.ms/vscode/api/incorrect-execution-location"
_PUBLISHING_DOCS = "https://code.visualstudio.com/api/working-with-extensions/publishing-extension"
_CONFIRM_RE = re.compile(r"^y$", re.IGNORECASE)



def _uniqueJoin(values: list[str]) -> str:
    return ",".join(dict.fromkeys(values))



class ManifestProcessor(BaseProcessor):
    """Identity, links and gallery metadata straight from package.json."""
    name = "manifest"

    def __init__(self, manifest: Manifest, logger: logging.Logger | None = None):
        super().__init__(manifest, logger)

        flags = ["Public"]
        if manifest.preview:
            flags.append("Preview")

        repository = getRepositoryUrl(manifest.repository)

        enableMarketplaceQnA: bool | None = None
        customerQnALink: str | None = None
        if manifest.qna == "marketplace":
            enableMarketplaceQnA = True
        elif isinstance(manifest.qna, str):
            customerQnALink = manifest.qna
        elif manifest.qna is False:
            enableMarketplaceQnA = False

        links: dict[str, Any] = {
            "repository": repository,
            "bugs": getUrl(manifest.bugs),
            "homepage": manifest.homepage,
        }
        if isGitHubRepository(repository):
            links["github"] = repository

        localizedLanguages = ",".join(
            loc.localizedLanguageName or loc.languageName or loc.languageId
            for loc in manifest.localizations()
        )

        self.manifestContribution = {
            "id": manifest.name,
            "displayName": manifest.displayName or manifest.name,
            "version": manifest.version,
            "publisher": manifest.publisher,
            "engine": (manifest.engines or {}).get("vscode"),
            "description": manifest.description or "",
            "categories": ",".join(manifest.categories),
            "flags": " ".join(flags),
            "links": links,
            "galleryBanner": manifest.galleryBanner.model_dump(exclude_none=True) if manifest.galleryBanner else {},
            "badges": [badge.model_dump() for badge in manifest.badges],
            "githubMarkdown": manifest.markdown != "standard",
            "enableMarketplaceQnA": enableMarketplaceQnA,
            "customerQnALink": customerQnALink,
            "extensionDependencies": _uniqueJoin(manifest.extensionDependencies),
            "extensionPack": _uniqueJoin(manifest.extensionPack),
            "localizedLanguages": localizedLanguages,
        }

    async def onEnd(self) -> None:
        if isinstance(self.manifest.extensionKind, str):
            self.logger.warning(
                "The 'extensionKind' property should be of type 'string[]'. Learn more at: %s",
                _EXTENSION_KIND_DOCS,
            )

        if self.manifest.publisher == "vscode-samples":
            raise ProcessorError(
                f"It's not allowed to use the 'vscode-samples' publisher. Learn more at: {_PUBLISHING_DOCS}."
            )

        if not self.manifest.repository:
            self.logger.warning("A 'repository' field is missing from the 'package.json' manifest file.")
            answer = await console.read("Do you want to continue? [y/N] ")
            if not _CONFIRM_RE.match(answer.strip()):
                raise ProcessorError("Aborted")
