# vsixforge/package.py
from __future__ import annotations

import asyncio
import logging
import math
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path

from vsixforge.app.settings import settings
from vsixforge.archive.assembler import assembleEntries
from vsixforge.archive.writer import writeVsix
from vsixforge.content.collector import collectFiles, toFileEntries
from vsixforge.content.files import FileEntry
from vsixforge.core.logging import setLogContext
from vsixforge.deps.process import runCommand
from vsixforge.manifest.loader import readManifest
from vsixforge.manifest.model import Manifest, PackageOptions
from vsixforge.pipeline.runner import processFiles
from vsixforge.processors import createDefaultProcessors

logger = logging.getLogger(__name__)

__all__ = [
    "PackageResult",
    "collect",
    "prepublish",
    "getDefaultPackageName",
    "getPackagePath",
    "pack",
    "packageCommand",
    "formatSize",
    "listFiles",
    "ls",
]


PREPUBLISH_SCRIPT = "vscode:prepublish"
BUNDLE_DOCS = "https://aka.ms/vscode-bundle-extension"
IGNORE_DOCS = "https://aka.ms/vscode-vscodeignore"

_JS_FILE_RE = re.compile(r"\.js$", re.IGNORECASE)



@dataclass(slots=True)
class PackageResult:
    manifest: Manifest
    packagePath: Path
    files: list[FileEntry]



def _cwdOf(options: PackageOptions) -> str:
    return options.cwd or os.getcwd()



async def collect(manifest: Manifest, options: PackageOptions | None = None) -> list[FileEntry]:
    """
    Every entry of the package for `manifest`, descriptors first.

    Collects and filters the project files, runs the default processors over
    them and renders the package manifest and content types.
    """
    options = options or PackageOptions()
    cwd = _cwdOf(options)
    processors = createDefaultProcessors(manifest, options, logger)

    setLogContext(phase="collect")
    candidates = await collectFiles(cwd, options.useYarn, options.dependencyEntryPoints, options.ignoreFile)
    files = await processFiles(processors, toFileEntries(candidates))

    setLogContext(phase="assemble")
    return assembleEntries(processors, files)



async def prepublish(cwd: str, manifest: Manifest, useYarn: bool = False) -> None:
    """Run the manifest's `vscode:prepublish` script, if it declares one."""
    if not manifest.scripts.get(PREPUBLISH_SCRIPT):
        return

    tool = "yarn && yarn" if useYarn else "npm ci && npm"
    command = f"{tool} run {PREPUBLISH_SCRIPT}"
    logger.warning("Executing prepublish script '%s'...", command)

    setLogContext(phase="prepublish")
    result = await runCommand(command, cwd=cwd)
    sys.stdout.write(result.stdout)
    sys.stderr.write(result.stderr)



def getDefaultPackageName(manifest: Manifest) -> str:
    return f"{manifest.name}-{manifest.version}.vsix"



def getPackagePath(cwd: str, manifest: Manifest, options: PackageOptions | None = None) -> Path:
    """
    Where the package goes: `<cwd>/<name>-<version>.vsix` by default, inside
    `packagePath` when that is an existing directory, else `packagePath` itself.
    """
    options = options or PackageOptions()
    if not options.packagePath:
        return Path(cwd) / getDefaultPackageName(manifest)

    target = Path(options.packagePath)
    if target.is_dir():
        return target / getDefaultPackageName(manifest)
    return target



def _warnLargePackage(files: list[FileEntry]) -> None:
    jsFiles = [file for file in files if _JS_FILE_RE.search(file.path)]
    if len(files) > int(settings("package.warnFileCount", 5000)) or len(jsFiles) > int(settings("package.warnJsFileCount", 100)):
        logger.info(
            "This extension consists of %d files, out of which %d are JavaScript files. For performance "
            "reasons, you should bundle your extension: %s . You should also exclude unnecessary files "
            "by adding them to your .vscodeignore: %s",
            len(files), len(jsFiles), BUNDLE_DOCS, IGNORE_DOCS,
        )



async def pack(options: PackageOptions | None = None) -> PackageResult:
    options = options or PackageOptions()
    cwd = _cwdOf(options)
    setLogContext(projectRoot=cwd, phase="manifest")

    manifest = await readManifest(cwd)
    await prepublish(cwd, manifest, options.useYarn)

    files = await collect(manifest, options)
    _warnLargePackage(files)

    packagePath = getPackagePath(cwd, manifest, options).resolve()
    setLogContext(phase="write")
    await writeVsix(files, packagePath)

    return PackageResult(manifest=manifest, packagePath=packagePath, files=files)



def _hundredths(value: float) -> str:
    # Half-up to two decimals, trailing zeros dropped ("12.5", "3")
    rounded = math.floor(value * 100 + 0.5) / 100
    return f"{rounded:.2f}".rstrip("0").rstrip(".")



def formatSize(size: int) -> str:
    if size > 1048576:
        return f"{_hundredths(size / 1048576)}MB"
    return f"{_hundredths(size / 1024)}KB"



async def packageCommand(options: PackageOptions | None = None) -> PackageResult:
    result = await pack(options)
    size = (await asyncio.to_thread(result.packagePath.stat)).st_size
    logger.info("Packaged: %s (%d files, %s)", result.packagePath, len(result.files), formatSize(size))
    return result



async def listFiles(
    cwd: str | None = None,
    useYarn: bool = False,
    packagedDependencies: list[str] | None = None,
    ignoreFile: str | None = None,
) -> list[str]:
    """Project-relative paths that would be packaged. Does not run prepublish."""
    cwd = cwd or os.getcwd()
    await readManifest(cwd)
    files = await collectFiles(cwd, useYarn, packagedDependencies, ignoreFile)
    return [candidate.relativePath for candidate in files]



async def ls(
    cwd: str | None = None,
    useYarn: bool = False,
    packagedDependencies: list[str] | None = None,
    ignoreFile: str | None = None,
) -> list[str]:
    """Runs prepublish, then prints the paths that would be packaged."""
    cwd = cwd or os.getcwd()
    setLogContext(projectRoot=cwd, phase="manifest")
    manifest = await readManifest(cwd)
    await prepublish(cwd, manifest, useYarn)

    files = await collectFiles(cwd, useYarn, packagedDependencies, ignoreFile)
    paths = [candidate.relativePath for candidate in files]
    for path in paths:
        print(path)
    return paths
