# tests/vsixforge/content/test_collector.py
from __future__ import annotations

import asyncio
import os

import pytest

from vsixforge.content import collector
from vsixforge.content.collector import CandidateFile, collectAllFiles, collectFiles, walkRoot
from vsixforge.content.files import FileEntry, readText
from vsixforge.core.errors import FilterError, ResolutionError
from vsixforge.deps.resolver import ResolvedRoot


def _write(root, relPath: str, text: str = "x") -> None:
    path = root / relPath
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def project(tmp_path, monkeypatch):
    _write(tmp_path, "package.json", "{}")
    _write(tmp_path, "extension.js")
    _write(tmp_path, ".vscodeignore", "src/**\n")
    _write(tmp_path, "src/index.ts")
    _write(tmp_path, "media/b.png")
    _write(tmp_path, "media/a.png")
    _write(tmp_path, ".hidden/config")
    _write(tmp_path, "node_modules/dep/index.js")
    _write(tmp_path, "node_modules/dep/node_modules/inner/index.js")
    _write(tmp_path, "node_modules/dev-only/index.js")

    roots = [
        ResolvedRoot(absolutePath=str(tmp_path), archiveAliasPrefix=""),
        ResolvedRoot(absolutePath=str(tmp_path / "node_modules" / "dep"), archiveAliasPrefix="node_modules/dep"),
        ResolvedRoot(
            absolutePath=str(tmp_path / "node_modules" / "dep" / "node_modules" / "inner"),
            archiveAliasPrefix="node_modules/dep/node_modules/inner",
        ),
    ]

    async def fakeResolveRoots(cwd, useYarn=False, packagedDependencies=None):
        return roots

    monkeypatch.setattr(collector, "resolveRoots", fakeResolveRoots)
    return tmp_path


def test_walkRoot_sorted_with_dotfiles_skipping_top_node_modules(project):
    assert walkRoot(str(project)) == [
        ".hidden/config",
        ".vscodeignore",
        "extension.js",
        "media/a.png",
        "media/b.png",
        "package.json",
        "src/index.ts",
    ]


def test_walkRoot_skips_dependency_own_node_modules(project):
    assert walkRoot(str(project / "node_modules" / "dep")) == ["index.js"]


@pytest.mark.asyncio
async def test_collectAllFiles_archive_paths_in_root_order(project):
    files = await collectAllFiles(project)
    assert [f.archivePath for f in files] == [
        "extension/.hidden/config",
        "extension/.vscodeignore",
        "extension/extension.js",
        "extension/media/a.png",
        "extension/media/b.png",
        "extension/package.json",
        "extension/src/index.ts",
        "extension/node_modules/dep/index.js",
        "extension/node_modules/dep/node_modules/inner/index.js",
    ]
    assert files[-1].sourceAbsolutePath == os.path.join(
        str(project), "node_modules", "dep", "node_modules", "inner", "index.js"
    )


@pytest.mark.asyncio
async def test_collectFiles_applies_ignore_rules(project):
    files = await collectFiles(project)
    assert [f.relativePath for f in files] == [
        ".hidden/config",
        "extension.js",
        "media/a.png",
        "media/b.png",
        "package.json",
        "node_modules/dep/index.js",
        "node_modules/dep/node_modules/inner/index.js",
    ]


@pytest.mark.asyncio
async def test_collectAllFiles_drops_names_with_carriage_return(tmp_path):
    _write(tmp_path, "Icon\r")
    _write(tmp_path, "ok.txt")
    roots = [ResolvedRoot(absolutePath=str(tmp_path), archiveAliasPrefix="")]

    files = await collectAllFiles(tmp_path, roots=roots)
    assert [f.relativePath for f in files] == ["ok.txt"]


@pytest.mark.asyncio
async def test_candidate_to_file_entry_reads_lazily(project):
    candidate = CandidateFile(
        archivePath="extension/package.json",
        sourceAbsolutePath=str(project / "package.json"),
    )
    entry = candidate.toFileEntry()
    assert entry == FileEntry(path="extension/package.json", localPath=str(project / "package.json"))
    assert await readText(entry) == "{}"


def test_file_entry_needs_a_source():
    with pytest.raises(ValueError):
        FileEntry(path="extension/x")


@pytest.mark.asyncio
async def test_resolution_error_wins_over_missing_ignore_file(tmp_path, monkeypatch):
    async def failingResolveRoots(cwd, useYarn=False, packagedDependencies=None):
        raise ResolutionError("Could not find dependency: ghost")

    monkeypatch.setattr(collector, "resolveRoots", failingResolveRoots)
    with pytest.raises(ResolutionError, match="ghost"):
        await collectFiles(tmp_path, ignoreFile="missing.ignore")


@pytest.mark.asyncio
async def test_ignore_file_is_read_after_resolution_finishes(tmp_path, monkeypatch):
    events: list[str] = []

    async def slowResolveRoots(cwd, useYarn=False, packagedDependencies=None):
        await asyncio.sleep(0.05)
        events.append("resolved")
        return [ResolvedRoot(absolutePath=str(cwd), archiveAliasPrefix="")]

    async def recordingLoadIgnoreRules(cwd, ignoreFile=None):
        events.append("ignore")
        raise FilterError(f"Ignore file not found: {ignoreFile}")

    monkeypatch.setattr(collector, "resolveRoots", slowResolveRoots)
    monkeypatch.setattr(collector, "loadIgnoreRules", recordingLoadIgnoreRules)

    with pytest.raises(FilterError):
        await collectFiles(tmp_path, ignoreFile="missing.ignore")
    assert events == ["resolved", "ignore"]
