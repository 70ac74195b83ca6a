# vsixforge/content/ignore.py
from __future__ import annotations

import asyncio
import logging
import os
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from wcmatch import glob

from vsixforge.core.errors import FilterError

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_IGNORE",
    "DEFAULT_IGNORE_FILE",
    "IgnoreRule",
    "IgnoreMatcher",
    "parseIgnoreRule",
    "parseIgnoreFile",
    "expandIgnoreRules",
    "loadIgnoreRules",
    "buildIgnoreMatcher",
]


DEFAULT_IGNORE_FILE = ".vscodeignore"

# Editor/VCS/package-manager metadata and build leftovers never shipped
DEFAULT_IGNORE: tuple[str, ...] = (
    ".vscodeignore",
    "package-lock.json",
    "yarn.lock",
    ".editorconfig",
    ".npmrc",
    ".yarnrc",
    ".gitattributes",
    "*.todo",
    "tslint.yaml",
    ".eslintrc*",
    ".babelrc*",
    ".prettierrc",
    "ISSUE_TEMPLATE.md",
    "CONTRIBUTING.md",
    "PULL_REQUEST_TEMPLATE.md",
    "CODE_OF_CONDUCT.md",
    ".github",
    ".travis.yml",
    "appveyor.yml",
    "**/.git/**",
    "**/*.vsix",
    "**/.DS_Store",
    "**/*.vsixmanifest",
    "**/.vscode-test/**",
)

# The manifest is always shipped, whatever the project rules say
FORCED_RULES: tuple[str, ...] = ("!package.json",)

GLOB_FLAGS = glob.GLOBSTAR | glob.DOTGLOB | glob.BRACE | glob.EXTGLOB | glob.FORCEUNIX

_NEGATION_RE = re.compile(r"^\s*!")
_COMMENT_RE = re.compile(r"^\s*#")
# Last path segment contains a wildcard
_WILDCARD_TAIL_RE = re.compile(r"(^|/)[^/]*\*[^/]*$")



@dataclass(frozen=True, slots=True)
class IgnoreRule:
    pattern: str
    isNegation: bool = False



def parseIgnoreRule(raw: str) -> IgnoreRule:
    if _NEGATION_RE.match(raw):
        return IgnoreRule(pattern=_NEGATION_RE.sub("", raw, count=1), isNegation=True)
    return IgnoreRule(pattern=raw, isNegation=False)



def parseIgnoreFile(text: str) -> list[str]:
    """Non-empty, non-comment lines of an ignore file, trimmed."""
    lines = (line.strip() for line in re.split(r"[\n\r]", text))
    return [line for line in lines if line and not _COMMENT_RE.match(line)]



def expandIgnoreRules(rules: Sequence[str]) -> list[str]:
    """
    Append a directory form for every rule that names a path without a wildcard.

    `out` also gets `out/**`, `docs/` also gets `docs/**`, `*.map` is left alone.
    """
    derived = [
        f"{rule}**" if rule.endswith("/") else f"{rule}/**"
        for rule in rules
        if not _WILDCARD_TAIL_RE.search(rule)
    ]
    return [*rules, *derived]



@dataclass(frozen=True, slots=True)
class IgnoreMatcher:
    """
    Compiled ignore rules.

    A path is included when no exclude rule matches it, or when a negate rule
    re-includes it. Paths are project-relative and forward-slashed.
    """
    excludes: tuple[str, ...]
    negates: tuple[str, ...]

    def _matchesAny(self, path: str, patterns: tuple[str, ...]) -> bool:
        if not patterns:
            return False
        return glob.globmatch(path, list(patterns), flags=GLOB_FLAGS)

    def isExcluded(self, path: str) -> bool:
        return self._matchesAny(path, self.excludes)

    def isIncluded(self, path: str) -> bool:
        return not self.isExcluded(path) or self._matchesAny(path, self.negates)

    def filter(self, paths: Iterable[str]) -> list[str]:
        return [path for path in paths if self.isIncluded(path)]



def buildIgnoreMatcher(rawIgnoreRules: Sequence[str] = ()) -> IgnoreMatcher:
    """Layer baseline defaults, project rules and the forced package.json re-include."""
    excludes: list[str] = []
    negates: list[str] = []
    for raw in (*DEFAULT_IGNORE, *rawIgnoreRules, *FORCED_RULES):
        rule = parseIgnoreRule(raw)
        if not rule.pattern:
            continue
        (negates if rule.isNegation else excludes).append(rule.pattern)
    return IgnoreMatcher(excludes=tuple(excludes), negates=tuple(negates))



def _readIgnoreFile(cwd: str, ignoreFile: str | None) -> list[str]:
    explicit = ignoreFile is not None
    path = Path(ignoreFile) if explicit else Path(cwd) / DEFAULT_IGNORE_FILE
    if explicit and not path.is_absolute():
        path = Path(cwd) / path

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as err:
        if explicit:
            raise FilterError(f"Ignore file not found: {ignoreFile}") from err
        return []

    rules = parseIgnoreFile(text)
    logger.debug("Loaded %d ignore rules from %s", len(rules), path)
    return rules



async def loadIgnoreRules(cwd: str | os.PathLike[str], ignoreFile: str | None = None) -> list[str]:
    """
    Project ignore rules, expanded with their directory forms.

    `ignoreFile` defaults to `<cwd>/.vscodeignore`, which may be missing. An
    explicitly named file must exist.
    """
    rules = await asyncio.to_thread(_readIgnoreFile, os.fspath(cwd), ignoreFile)
    return expandIgnoreRules(rules)
