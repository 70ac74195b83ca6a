# tests/vsixforge/content/test_ignore.py
from __future__ import annotations

import pytest

from vsixforge.core.errors import FilterError
from vsixforge.content.ignore import (
    IgnoreRule,
    buildIgnoreMatcher,
    expandIgnoreRules,
    loadIgnoreRules,
    parseIgnoreFile,
    parseIgnoreRule,
)


def _included(rules: list[str], paths: list[str]) -> list[str]:
    return buildIgnoreMatcher(expandIgnoreRules(rules)).filter(paths)


def test_parseIgnoreFile_drops_blanks_and_comments():
    text = "out\r\n\n  # comment\n  src/**/*.ts  \n#another\n!keep.txt\n"
    assert parseIgnoreFile(text) == ["out", "src/**/*.ts", "!keep.txt"]


def test_parseIgnoreRule_negation():
    assert parseIgnoreRule("!docs/a.md") == IgnoreRule(pattern="docs/a.md", isNegation=True)
    assert parseIgnoreRule("docs") == IgnoreRule(pattern="docs", isNegation=False)


@pytest.mark.parametrize(
    "rule, expanded",
    [
        ("out", ["out", "out/**"]),
        ("docs/", ["docs/", "docs/**"]),
        ("src/test", ["src/test", "src/test/**"]),
        ("*.map", ["*.map"]),
        ("src/**/*.ts", ["src/**/*.ts"]),
        ("!node_modules/foo", ["!node_modules/foo", "!node_modules/foo/**"]),
    ],
)
def test_expandIgnoreRules(rule, expanded):
    assert expandIgnoreRules([rule]) == expanded


def test_rule_excludes_directory_and_its_contents():
    paths = ["out", "out/foo.js", "out/nested/bar.js", "outside.js", "src/out.ts"]
    assert _included(["out"], paths) == ["outside.js", "src/out.ts"]


def test_negation_reincludes_excluded_file():
    paths = ["src/a.ts", "src/b.ts", "src/keep.ts"]
    assert _included(["src/**", "!src/keep.ts"], paths) == ["src/keep.ts"]


def test_negation_only_rule_includes_path():
    # A path matching only a negate rule stays included
    assert _included(["!whatever.txt"], ["whatever.txt"]) == ["whatever.txt"]


def test_defaults_exclude_metadata():
    paths = [
        "package.json",
        "yarn.lock",
        ".vscodeignore",
        "node_modules/a/.git/HEAD",
        "sub/old.vsix",
        "a/.DS_Store",
        ".eslintrc.json",
        "extension.js",
        "notes.todo",
        "deep/notes.todo",
        ".vscode-test/cache/x",
    ]
    assert _included([], paths) == ["package.json", "extension.js", "deep/notes.todo"]


def test_package_json_is_always_included():
    assert _included(["*.json", "package.json"], ["package.json", "tsconfig.json"]) == ["package.json"]


def test_glob_semantics_dotfiles_and_braces():
    paths = [".env", "src/.hidden/x.ts", "a.ts", "b.js", "c.md"]
    assert _included(["**/*.{ts,js}", ".env"], paths) == ["c.md"]


def test_extglob_patterns():
    paths = ["a.js", "b.js", "ab.js", "c.js", "lib/x.map", "lib/x.js"]
    assert _included(["@(a|b).js", "lib/!(*.js)"], paths) == ["ab.js", "c.js", "lib/x.js"]


def test_matching_is_case_sensitive():
    assert _included(["readme.md"], ["README.md", "readme.md"]) == ["README.md"]


@pytest.mark.asyncio
async def test_loadIgnoreRules_default_file(tmp_path):
    (tmp_path / ".vscodeignore").write_text("src/**\n# comment\nout\n", encoding="utf-8")
    assert await loadIgnoreRules(tmp_path) == ["src/**", "out", "out/**"]


@pytest.mark.asyncio
async def test_loadIgnoreRules_missing_default_file_is_empty(tmp_path):
    assert await loadIgnoreRules(tmp_path) == []


@pytest.mark.asyncio
async def test_loadIgnoreRules_missing_explicit_file_raises(tmp_path):
    with pytest.raises(FilterError):
        await loadIgnoreRules(tmp_path, "custom.ignore")


@pytest.mark.asyncio
async def test_loadIgnoreRules_explicit_file(tmp_path):
    (tmp_path / "custom.ignore").write_text("*.map\n", encoding="utf-8")
    (tmp_path / ".vscodeignore").write_text("everything\n", encoding="utf-8")
    assert await loadIgnoreRules(tmp_path, "custom.ignore") == ["*.map"]
