# vsixforge/processors/tags.py
from __future__ import annotations
import re
from collections.abc import Iterable, Mapping
from typing import Any

from .base import BaseProcessor

__all__ = ["TagsProcessor", "KEYWORDS", "toExtensionTags", "toLanguagePackTags"]


# Description keyword -> gallery tags
KEYWORDS: dict[str, list[str]] = {
    "git": ["git"],
    "npm": ["node"],
    "spell": ["markdown"],
    "bootstrap": ["bootstrap"],
    "lint": ["linters"],
    "linting": ["linters"],
    "react": ["javascript"],
    "js": ["javascript"],
    "node": ["javascript", "node"],
    "c++": ["c++"],
    "Cplusplus": ["c++"],
    "xml": ["xml"],
    "angular": ["javascript"],
    "jquery": ["javascript"],
    "php": ["php"],
    "python": ["python"],
    "latex": ["latex"],
    "ruby": ["ruby"],
    "java": ["java"],
    "erlang": ["erlang"],
    "sql": ["sql"],
    "nodejs": ["node"],
    "c#": ["c#"],
    "css": ["css"],
    "javascript": ["javascript"],
    "ftp": ["ftp"],
    "haskell": ["haskell"],
    "unity": ["unity"],
    "terminal": ["terminal"],
    "powershell": ["powershell"],
    "laravel": ["laravel"],
    "meteor": ["meteor"],
    "emmet": ["emmet"],
    "eslint": ["linters"],
    "tfs": ["tfs"],
    "rust": ["rust"],
}

_KEYWORD_PATTERNS: list[tuple[re.Pattern[str], list[str]]] = [
    (re.compile(r"\b(?:" + re.escape(keyword) + r")(?!\w)", re.IGNORECASE | re.ASCII), tags)
    for keyword, tags in KEYWORDS.items()
]
_NON_WORD_RE = re.compile(r"\W", re.ASCII)
_ON_LANGUAGE_RE = re.compile(r"^onLanguage:(.*)$")



def toExtensionTags(extensions: Iterable[str]) -> list[str]:
    stripped = (_NON_WORD_RE.sub("", str(ext)) for ext in extensions)
    return [f"__ext_{ext}" for ext in stripped if ext]



def toLanguagePackTags(translations: Iterable[Mapping[str, Any]] | None, languageId: str) -> list[str]:
    tags: list[str] = []
    for translation in translations or []:
        translationId = translation.get("id")
        tags.extend((f"__lp_{translationId}", f"__lp-{languageId}_{translationId}"))
    return tags



class TagsProcessor(BaseProcessor):
    """Derives the gallery tag list from keywords, contributions and the description."""
    name = "tags"

    def _contributes(self, point: str) -> bool:
        return len(self.manifest.contributions(point)) > 0

    async def onEnd(self) -> None:
        manifest = self.manifest
        tags: list[Any] = list(manifest.keywords)

        if self._contributes("themes"):
            tags += ["theme", "color-theme"]
        if self._contributes("iconThemes"):
            tags += ["theme", "icon-theme"]
        if self._contributes("snippets"):
            tags.append("snippet")
        if self._contributes("keybindings"):
            tags.append("keybindings")
        if self._contributes("debuggers"):
            tags.append("debuggers")
        if self._contributes("jsonValidation"):
            tags.append("json")

        for loc in manifest.contributions("localizations"):
            if not isinstance(loc, Mapping):
                continue
            languageId = loc.get("languageId")
            tags.append(f"lp-{languageId}")
            tags += toLanguagePackTags(loc.get("translations"), languageId)

        for lang in manifest.contributions("languages"):
            if not isinstance(lang, Mapping):
                continue
            tags.append(lang.get("id"))
            tags += lang.get("aliases") or []
            tags += toExtensionTags(lang.get("extensions") or [])

        for event in manifest.activationEvents:
            mtch = _ON_LANGUAGE_RE.match(event)
            if mtch:
                tags.append(mtch.group(1))

        for grammar in manifest.contributions("grammars"):
            if isinstance(grammar, Mapping):
                tags.append(grammar.get("language"))

        description = manifest.description or ""
        for pattern, keywordTags in _KEYWORD_PATTERNS:
            if pattern.search(description):
                tags += keywordTags

        unique = dict.fromkeys(tag for tag in tags if tag)
        self.manifestContribution["tags"] = ",".join(str(tag) for tag in unique)
