# vsixforge/processors/__init__.py
from __future__ import annotations
import logging

from vsixforge.manifest.model import Manifest, PackageOptions
from .base import Asset, BaseProcessor
from .icon import IconProcessor
from .license import LicenseProcessor
from .manifest import ManifestProcessor
from .markdown import ChangelogProcessor, MarkdownProcessor, ReadmeProcessor
from .nls import NLSProcessor
from .tags import TagsProcessor
from .validation import ValidationProcessor

__all__ = [
    "Asset",
    "BaseProcessor",
    "ManifestProcessor",
    "TagsProcessor",
    "MarkdownProcessor",
    "ReadmeProcessor",
    "ChangelogProcessor",
    "LicenseProcessor",
    "IconProcessor",
    "NLSProcessor",
    "ValidationProcessor",
    "createDefaultProcessors",
]



def createDefaultProcessors(
    manifest: Manifest,
    options: PackageOptions | None = None,
    logger: logging.Logger | None = None,
) -> list[BaseProcessor]:
    """The packaging processors, in the order they see each file."""
    options = options or PackageOptions()

    def child(name: str) -> logging.Logger | None:
        return logger.getChild(name) if logger is not None else None

    return [
        ManifestProcessor(manifest, child(ManifestProcessor.name)),
        TagsProcessor(manifest, child(TagsProcessor.name)),
        ReadmeProcessor(manifest, options, child(ReadmeProcessor.name)),
        ChangelogProcessor(manifest, options, child(ChangelogProcessor.name)),
        LicenseProcessor(manifest, child(LicenseProcessor.name)),
        IconProcessor(manifest, child(IconProcessor.name)),
        NLSProcessor(manifest, child(NLSProcessor.name)),
        ValidationProcessor(manifest, child(ValidationProcessor.name)),
    ]
