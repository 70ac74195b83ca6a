# vsixforge/archive/writer.py
from __future__ import annotations

import asyncio
import json
import logging
import os
import zipfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from vsixforge.content.files import FileEntry
from vsixforge.core.errors import AssemblyError
from .assembler import VSIX_MANIFEST_PATH, parseVsixManifest

logger = logging.getLogger(__name__)

__all__ = ["FIXED_DATE_TIME", "writeVsix", "readManifestFromPackage", "readVsixManifest"]


# Earliest timestamp a zip entry can carry
FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)
PACKAGE_MANIFEST_PATH = "extension/package.json"



def _entryBytes(entry: FileEntry) -> bytes:
    if entry.contents is not None:
        return entry.contents
    return Path(entry.localPath).read_bytes()  # type: ignore[arg-type]



def _zipInfo(path: str) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(path, date_time=FIXED_DATE_TIME)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.create_system = 3
    info.external_attr = 0o100644 << 16
    return info



def _writeVsixSync(entries: Sequence[FileEntry], packagePath: Path) -> None:
    try:
        packagePath.unlink()
    except FileNotFoundError:
        pass

    try:
        with zipfile.ZipFile(packagePath, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for entry in entries:
                zf.writestr(_zipInfo(entry.path), _entryBytes(entry))
    except OSError as err:
        packagePath.unlink(missing_ok=True)
        raise AssemblyError(f"Failed to write package '{packagePath}': {err}") from err



async def writeVsix(entries: Sequence[FileEntry], packagePath: str | os.PathLike[str]) -> Path:
    """
    Write `entries` as a deflated zip, in order, with fixed timestamps.

    An existing file at `packagePath` is replaced.
    """
    target = Path(packagePath)
    await asyncio.to_thread(_writeVsixSync, entries, target)
    logger.debug("Wrote %d entries to %s", len(entries), target)
    return target



def _readEntry(packagePath: Path, entryPath: str, missingMessage: str) -> bytes:
    try:
        with zipfile.ZipFile(packagePath) as zf:
            try:
                return zf.read(entryPath)
            except KeyError as err:
                raise AssemblyError(missingMessage) from err
    except (OSError, zipfile.BadZipFile) as err:
        raise AssemblyError(f"Failed to read package '{packagePath}': {err}") from err



async def readManifestFromPackage(packagePath: str | os.PathLike[str]) -> dict[str, Any]:
    """The `package.json` shipped inside an existing package."""
    raw = await asyncio.to_thread(_readEntry, Path(packagePath), PACKAGE_MANIFEST_PATH, "Manifest not found")
    try:
        manifest = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as err:
        raise AssemblyError(f"Invalid manifest in package '{packagePath}': {err}") from err
    if not isinstance(manifest, dict):
        raise AssemblyError(f"Invalid manifest in package '{packagePath}'")
    return manifest



async def readVsixManifest(packagePath: str | os.PathLike[str]) -> dict[str, Any]:
    raw = await asyncio.to_thread(
        _readEntry, Path(packagePath), VSIX_MANIFEST_PATH, "Package manifest not found"
    )
    return parseVsixManifest(raw)
