# vsixforge/manifest/loader.py
from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from vsixforge.core.errors import ManifestError
from .model import Manifest
from .nls import patchNLS
from .validation import validateManifest

logger = logging.getLogger(__name__)

__all__ = ["MANIFEST_NAME", "MANIFEST_NLS_NAME", "readManifest", "parseManifest"]


MANIFEST_NAME = "package.json"
MANIFEST_NLS_NAME = "package.nls.json"



def parseManifest(rawJson: Mapping[str, Any]) -> Manifest:
    try:
        return Manifest.model_validate(rawJson)
    except ValidationError as err:
        raise ManifestError(f"Invalid '{MANIFEST_NAME}' manifest file: {err}") from err



def _loadManifestJson(manifestPath: Path) -> dict[str, Any]:
    try:
        raw = manifestPath.read_text(encoding="utf-8")
    except OSError as err:
        raise ManifestError(f"Extension manifest not found: {manifestPath}") from err

    try:
        rawJson = json.loads(raw)
    except json.JSONDecodeError as err:
        raise ManifestError(f"Error parsing '{MANIFEST_NAME}' manifest file: not a valid JSON file.") from err

    if not isinstance(rawJson, dict):
        raise ManifestError(f"Manifest file '{manifestPath}' is not a JSON object")
    return rawJson



def _loadTranslations(nlsPath: Path) -> dict[str, str]:
    try:
        raw = nlsPath.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}

    try:
        translations = json.loads(raw)
    except json.JSONDecodeError as err:
        raise ManifestError(f"Error parsing JSON manifest translations file: {nlsPath}") from err

    if not isinstance(translations, dict):
        raise ManifestError(f"Error parsing JSON manifest translations file: {nlsPath}")
    return {str(key): str(value) for key, value in translations.items()}



def _readManifestSync(cwd: Path, nls: bool) -> Manifest:
    rawJson = _loadManifestJson(cwd / MANIFEST_NAME)
    manifest = validateManifest(parseManifest(rawJson))

    if not nls:
        return manifest

    translations = _loadTranslations(cwd / MANIFEST_NLS_NAME)
    if not translations:
        return manifest
    logger.debug("Applying %d manifest translations from %s", len(translations), MANIFEST_NLS_NAME)
    return parseManifest(patchNLS(rawJson, translations))



async def readManifest(cwd: str | Path | None = None, nls: bool = True) -> Manifest:
    """
    Read, validate and localize `<cwd>/package.json`.

    `package.nls.json` is optional; when present its keys replace "%key%"
    placeholders anywhere in the manifest.
    """
    root = Path(cwd) if cwd is not None else Path.cwd()
    return await asyncio.to_thread(_readManifestSync, root, nls)
