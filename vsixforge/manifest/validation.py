# vsixforge/manifest/validation.py
from __future__ import annotations
import re
from urllib.parse import unquote, urlsplit

from vsixforge.core.errors import ManifestError
from vsixforge.semver.semver import isValidSemVer, parseSemVerVersion, plainVersion
from .model import Manifest
from .urls import isHostTrusted

__all__ = [
    "validatePublisher", "validateExtensionName", "validateVersion",
    "validateEngineCompatibility", "validateVSCodeTypesCompatibility",
    "validateManifest",
]


_PUBLISHING_DOCS = "https://code.visualstudio.com/api/working-with-extensions/publishing-extension#publishing-extensions"
_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9\-]*$", re.IGNORECASE)
_ENGINE_RE = re.compile(r"^\*$|^(\^|>=)?((\d+)|x)\.((\d+)|x)\.((\d+)|x)(\-.*)?$")



def validatePublisher(publisher: str | None) -> None:
    if not publisher:
        raise ManifestError(f"Missing publisher name. Learn more: {_PUBLISHING_DOCS}")

    if not _NAME_RE.match(publisher):
        raise ManifestError(
            f"Invalid publisher name '{publisher}'. Expected the identifier of a publisher, "
            f"not its human-friendly name.  Learn more: {_PUBLISHING_DOCS}"
        )



def validateExtensionName(name: str | None) -> None:
    if not name:
        raise ManifestError("Missing extension name")

    if not _NAME_RE.match(name):
        raise ManifestError(f"Invalid extension name '{name}'")



def validateVersion(version: str | None) -> None:
    if not version:
        raise ManifestError("Missing extension version")

    if not isValidSemVer(version):
        raise ManifestError(f"Invalid extension version '{version}'")



def validateEngineCompatibility(version: str | None) -> None:
    if not version:
        raise ManifestError("Missing vscode engine compatibility version")

    if not _ENGINE_RE.match(version):
        raise ManifestError(f"Invalid vscode engine compatibility version '{version}'")



def validateVSCodeTypesCompatibility(engineVersion: str, typeVersion: str | None) -> None:
    """
    `@types/vscode` must not be newer than `engines.vscode`.

    Every `x` in the engine version counts as 0 (the smallest matching version).
    """
    if engineVersion == "*":
        return

    if not typeVersion:
        raise ManifestError("Missing @types/vscode version")

    try:
        plainEngine = parseSemVerVersion(plainVersion(engineVersion).replace("x", "0"))
    except (ValueError, TypeError) as err:
        raise ManifestError("Failed to parse semver of engines.vscode") from err

    try:
        plainType = parseSemVerVersion(plainVersion(typeVersion))
    except (ValueError, TypeError) as err:
        raise ManifestError("Failed to parse semver of @types/vscode") from err

    if plainType.core > plainEngine.core:
        raise ManifestError(
            f"@types/vscode {typeVersion} greater than engines.vscode {engineVersion}. "
            "Consider upgrade engines.vscode or use an older @types/vscode version"
        )



def _validateBadgeUrl(url: str) -> None:
    srcUrl = urlsplit(unquote(url))

    if srcUrl.scheme.lower() != "https":
        raise ManifestError(f"Badge URLs must come from an HTTPS source: {url}")

    if srcUrl.path.lower().endswith(".svg") and not isHostTrusted(srcUrl.hostname):
        raise ManifestError(
            f"Badge SVGs are restricted. Please use other file image formats, such as PNG: {url}"
        )



def validateManifest(manifest: Manifest) -> Manifest:
    validatePublisher(manifest.publisher)
    validateExtensionName(manifest.name)

    if not manifest.version:
        raise ManifestError("Manifest missing field: version")

    validateVersion(manifest.version)

    if not manifest.engines:
        raise ManifestError("Manifest missing field: engines")

    engine = manifest.engines.get("vscode")
    if not engine:
        raise ManifestError("Manifest missing field: engines.vscode")

    validateEngineCompatibility(engine)

    typesVersion = manifest.devDependencies.get("@types/vscode")
    if typesVersion:
        validateVSCodeTypesCompatibility(engine, typesVersion)

    if (manifest.icon or "").lower().endswith(".svg"):
        raise ManifestError(f"SVGs can't be used as icons: {manifest.icon}")

    for badge in manifest.badges:
        _validateBadgeUrl(badge.url)

    if "vscode" in manifest.dependencies:
        raise ManifestError(
            "You should not depend on 'vscode' in your 'dependencies'. "
            "Did you mean to add it to 'devDependencies'?"
        )

    return manifest
