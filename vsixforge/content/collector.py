# vsixforge/content/collector.py
from __future__ import annotations

import asyncio
import logging
import os
import re
from collections.abc import Sequence
from dataclasses import dataclass

from vsixforge.core.paths import normalizePath, stripArchiveRoot, toArchivePath
from vsixforge.deps.resolver import NODE_MODULES, ResolvedRoot, resolveRoots
from .files import FileEntry
from .ignore import buildIgnoreMatcher, loadIgnoreRules

logger = logging.getLogger(__name__)

__all__ = ["CandidateFile", "walkRoot", "collectAllFiles", "collectFiles", "toFileEntries"]


_TRAILING_CR_RE = re.compile(r"\r$", re.MULTILINE)



@dataclass(frozen=True, slots=True)
class CandidateFile:
    archivePath: str
    sourceAbsolutePath: str

    @property
    def relativePath(self) -> str:
        return stripArchiveRoot(self.archivePath)

    def toFileEntry(self) -> FileEntry:
        return FileEntry(path=self.archivePath, localPath=self.sourceAbsolutePath)



def walkRoot(rootPath: str) -> list[str]:
    """
    Every regular file below `rootPath`, relative to it, forward-slashed and sorted.

    Dotfiles are included. The root's own node_modules directory is skipped
    entirely; dependencies installed there are walked as roots of their own.
    """
    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(rootPath):
        if dirpath == rootPath:
            dirnames[:] = [name for name in dirnames if name != NODE_MODULES]
        dirnames.sort()
        relDir = os.path.relpath(dirpath, rootPath)
        for filename in filenames:
            relPath = filename if relDir == "." else os.path.join(relDir, filename)
            found.append(normalizePath(relPath))
    found.sort()
    return found



def _collectRoot(cwd: str, root: ResolvedRoot) -> list[CandidateFile]:
    out: list[CandidateFile] = []
    for relPath in walkRoot(root.absolutePath):
        absPath = os.path.join(root.absolutePath, relPath)
        projectRelative = normalizePath(os.path.relpath(absPath, cwd))
        if _TRAILING_CR_RE.search(projectRelative):
            logger.debug("Skipping file with a carriage return in its name: %r", projectRelative)
            continue
        out.append(CandidateFile(archivePath=toArchivePath(projectRelative), sourceAbsolutePath=absPath))
    return out



async def collectAllFiles(
    cwd: str | os.PathLike[str],
    useYarn: bool = False,
    dependencyEntryPoints: Sequence[str] | None = None,
    roots: Sequence[ResolvedRoot] | None = None,
) -> list[CandidateFile]:
    """
    The file universe: every file of the project and of its production dependencies.

    Roots are walked concurrently; the result keeps root order.
    """
    cwdStr = os.fspath(cwd)
    if roots is None:
        roots = await resolveRoots(cwdStr, useYarn, dependencyEntryPoints)

    perRoot = await asyncio.gather(*(asyncio.to_thread(_collectRoot, cwdStr, root) for root in roots))
    files = [candidate for batch in perRoot for candidate in batch]
    logger.debug("Collected %d candidate files from %d roots", len(files), len(roots))
    return files



async def collectFiles(
    cwd: str | os.PathLike[str],
    useYarn: bool = False,
    dependencyEntryPoints: Sequence[str] | None = None,
    ignoreFile: str | None = None,
) -> list[CandidateFile]:
    """Collected files that survive the ignore rules, in collection order."""
    cwdStr = os.fspath(cwd)
    # Resolution failures must surface before the ignore file is touched
    files = await collectAllFiles(cwdStr, useYarn, dependencyEntryPoints)
    rules = await loadIgnoreRules(cwdStr, ignoreFile)
    matcher = buildIgnoreMatcher(rules)
    included = [candidate for candidate in files if matcher.isIncluded(candidate.relativePath)]
    logger.debug("%d of %d files pass the ignore rules", len(included), len(files))
    return included



def toFileEntries(files: Sequence[CandidateFile]) -> list[FileEntry]:
    return [candidate.toFileEntry() for candidate in files]
