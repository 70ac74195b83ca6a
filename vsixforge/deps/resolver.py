# vsixforge/deps/resolver.py
from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from vsixforge.app.settings import settings
from vsixforge.core.errors import ResolutionError
from vsixforge.core.paths import normalizePath
from vsixforge.semver.semver import isRangeLabel, packageNameFromLabel
from .process import runCommand

logger = logging.getLogger(__name__)

__all__ = [
    "ResolvedRoot",
    "DependencyNode",
    "getDependencies",
    "resolveRoots",
    "toDependencyNodes",
    "selectReachable",
    "flattenDependencyPaths",
    "parseYarnTreeOutput",
]


NODE_MODULES = "node_modules"
YARN_LOCK = "yarn.lock"

_BROKEN_NPM_RE = re.compile(r"^3\.7\.[0123]$")
_YARN_TREE_LINE_RE = re.compile(r'^{"type":"tree".*$', re.MULTILINE)



@dataclass(frozen=True, slots=True)
class ResolvedRoot:
    """A directory whose files are candidates for the package."""
    absolutePath: str
    # Location relative to the project root ("" for the project itself)
    archiveAliasPrefix: str



@dataclass(slots=True)
class DependencyNode:
    name: str
    installPath: str
    children: list[DependencyNode] = field(default_factory=list)



def _dedupe(paths: Iterable[str]) -> list[str]:
    out: list[str] = []
    seen: set[str] = set()
    for path in paths:
        key = os.path.normpath(os.path.abspath(path))
        if key not in seen:
            out.append(path)
            seen.add(key)
    return out



# ------------------------------------------------------------------ #
# Flat-report mode (npm)
# ------------------------------------------------------------------ #

async def _checkNpm(cwd: str) -> None:
    result = await runCommand(settings("resolver.npmVersionCommand", "npm -v"), cwd=cwd)
    version = result.stdout.strip()
    if _BROKEN_NPM_RE.match(version):
        raise ResolutionError(
            f"npm@{version} doesn't work with vsixforge. Please update npm: npm install -g npm"
        )



async def getNpmDependencies(cwd: str) -> list[str]:
    """
    Every installed production package directory, as reported by `npm list`.

    npm has already dropped dev dependencies; no reachability is computed here.
    """
    await _checkNpm(cwd)
    result = await runCommand(settings("resolver.npmListCommand"), cwd=cwd)
    return [line for line in re.split(r"[\r\n]", result.stdout) if os.path.isabs(line)]



# ------------------------------------------------------------------ #
# Tree-report mode (yarn)
# ------------------------------------------------------------------ #

def parseYarnTreeOutput(raw: str) -> list[Mapping[str, Any]]:
    """Extract `data.trees` from the `yarn list --json` line of type "tree"."""
    mtch = _YARN_TREE_LINE_RE.search(raw or "")
    if not mtch:
        raise ResolutionError("Could not parse result of `yarn list --json`")

    try:
        payload = json.loads(mtch.group(0))
        trees = payload["data"]["trees"]
    except (json.JSONDecodeError, KeyError, TypeError) as err:
        raise ResolutionError("Could not parse result of `yarn list --json`") from err

    if not isinstance(trees, list) or not all(isinstance(tree, Mapping) for tree in trees):
        raise ResolutionError("Could not parse result of `yarn list --json`: 'trees' is not a list of objects")
    return trees



def _rawLabel(rawNode: Mapping[str, Any]) -> str:
    label = rawNode.get("name")
    if not isinstance(label, str) or not label:
        raise ResolutionError(f"Malformed dependency tree node: {dict(rawNode)!r}")
    return label



def _rawChildren(rawNode: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    children = rawNode.get("children") or []
    if not isinstance(children, list) or not all(isinstance(child, Mapping) for child in children):
        raise ResolutionError(f"Malformed children of dependency tree node {rawNode.get('name')!r}")
    return children



def toDependencyNodes(prefix: str, trees: Sequence[Mapping[str, Any]], prune: bool) -> list[DependencyNode]:
    """
    Convert raw yarn tree nodes into DependencyNodes rooted at `prefix`.

    A node lives at `prefix/<name>`; its children at `prefix/<name>/node_modules/<child>`.
    With `prune`, nodes labelled with a caret/tilde range (and their subtrees)
    are dropped.
    """
    roots: list[DependencyNode] = []
    # (prefix, raw node, list the converted node is appended to)
    stack: list[tuple[str, Mapping[str, Any], list[DependencyNode]]] = [
        (prefix, tree, roots) for tree in reversed(trees)
    ]

    while stack:
        nodePrefix, rawNode, siblings = stack.pop()
        label = _rawLabel(rawNode)
        if prune and isRangeLabel(label):
            continue

        name = packageNameFromLabel(label)
        node = DependencyNode(name=name, installPath=os.path.join(nodePrefix, name))
        siblings.append(node)

        childPrefix = os.path.join(nodePrefix, name, NODE_MODULES)
        for child in reversed(_rawChildren(rawNode)):
            stack.append((childPrefix, child, node.children))

    return roots



def selectReachable(deps: Sequence[DependencyNode], entryPoints: Iterable[str]) -> list[DependencyNode]:
    """
    Depth-first walk from each entry point over the top-level dependency index.

    Children are looked up by name among the top-level nodes. Each node is
    reported once, in first-visit order, so cycles and diamonds terminate.
    """
    index: dict[str, DependencyNode] = {}
    for dep in deps:
        if dep.name in index:
            raise ResolutionError(f"Dependency seen more than once: {dep.name}")
        index[dep.name] = dep

    def find(name: str) -> DependencyNode:
        dep = index.get(name)
        if dep is None:
            raise ResolutionError(f"Could not find dependency: {name}")
        return dep

    reached: list[DependencyNode] = []
    visited: set[str] = set()

    for entryPoint in entryPoints:
        stack: list[str] = [entryPoint]
        while stack:
            dep = find(stack.pop())
            if dep.name in visited:
                continue
            visited.add(dep.name)
            reached.append(dep)
            for child in reversed(dep.children):
                stack.append(child.name)

    return reached



def flattenDependencyPaths(deps: Sequence[DependencyNode]) -> list[str]:
    """Install paths in pre-order (node, then its nested children)."""
    result: list[str] = []
    stack: list[DependencyNode] = list(reversed(deps))
    while stack:
        dep = stack.pop()
        result.append(dep.installPath)
        stack.extend(reversed(dep.children))
    return result



async def getYarnProductionDependencies(
    cwd: str,
    packagedDependencies: Sequence[str] | None = None,
) -> list[DependencyNode]:
    result = await runCommand(settings("resolver.yarnListCommand"), cwd=cwd)
    trees = parseYarnTreeOutput(result.stdout)

    usingPackagedDependencies = packagedDependencies is not None
    deps = toDependencyNodes(
        os.path.join(cwd, NODE_MODULES),
        trees,
        prune=not usingPackagedDependencies,
    )

    if usingPackagedDependencies:
        deps = selectReachable(deps, packagedDependencies or ())

    return deps



async def getYarnDependencies(cwd: str, packagedDependencies: Sequence[str] | None = None) -> list[str]:
    result: list[str] = [cwd]

    if os.path.exists(os.path.join(cwd, YARN_LOCK)):
        deps = await getYarnProductionDependencies(cwd, packagedDependencies)
        result.extend(flattenDependencyPaths(deps))
    else:
        logger.debug("No %s in %s; packaging without extra dependencies", YARN_LOCK, cwd)

    return _dedupe(result)



# ------------------------------------------------------------------ #
# Public API
# ------------------------------------------------------------------ #

async def getDependencies(
    cwd: str | Path,
    useYarn: bool = False,
    packagedDependencies: Sequence[str] | None = None,
) -> list[str]:
    """
    Absolute directories of the project and its production dependencies.

    npm mode ignores `packagedDependencies`; yarn mode uses them as entry
    points for a reachability walk instead of range-based pruning.
    """
    cwdStr = str(cwd)
    if useYarn:
        deps = await getYarnDependencies(cwdStr, packagedDependencies)
    else:
        deps = _dedupe(await getNpmDependencies(cwdStr))
    logger.debug("Resolved %d package directories (%s mode)", len(deps), "yarn" if useYarn else "npm")
    return deps



async def resolveRoots(
    cwd: str | Path,
    useYarn: bool = False,
    packagedDependencies: Sequence[str] | None = None,
) -> list[ResolvedRoot]:
    cwdStr = str(cwd)
    out: list[ResolvedRoot] = []
    for dep in await getDependencies(cwdStr, useYarn, packagedDependencies):
        alias = normalizePath(os.path.relpath(dep, cwdStr))
        out.append(ResolvedRoot(absolutePath=dep, archiveAliasPrefix="" if alias == "." else alias))
    return out
