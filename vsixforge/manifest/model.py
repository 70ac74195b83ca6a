# vsixforge/manifest/model.py
from __future__ import annotations
from typing import Any

from pydantic import BaseModel, Field, ConfigDict

__all__ = [
    "RepositoryRef", "Badge", "GalleryBanner", "Translation",
    "Localization", "Manifest", "PackageOptions",
]



class RepositoryRef(BaseModel):
    """`repository` / `bugs` given as an object ({"type": "git", "url": "..."})."""
    model_config = ConfigDict(extra="allow")

    type: str | None = None
    url: str | None = None



class Badge(BaseModel):
    model_config = ConfigDict(extra="allow")

    url: str
    href: str = ""
    description: str = ""



class GalleryBanner(BaseModel):
    model_config = ConfigDict(extra="allow")

    color: str | None = None
    theme: str | None = None



class Translation(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    path: str | None = None



class Localization(BaseModel):
    model_config = ConfigDict(extra="allow")

    languageId: str
    languageName: str | None = None
    localizedLanguageName: str | None = None
    translations: list[Translation] = Field(default_factory=list)



class Manifest(BaseModel):
    """
    The project's `package.json`, already parsed and NLS-patched.

    Everything beyond identity is optional; `validateManifest` enforces the
    required fields with readable messages. Unknown keys are kept.
    """
    model_config = ConfigDict(extra="allow")

    name: str | None = None
    version: str | None = None
    publisher: str | None = None
    engines: dict[str, str] | None = None

    displayName: str | None = None
    description: str | None = None
    categories: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    icon: str | None = None
    preview: bool = False
    license: str | None = None
    homepage: str | None = None
    repository: str | RepositoryRef | None = None
    bugs: str | RepositoryRef | None = None
    galleryBanner: GalleryBanner | None = None
    badges: list[Badge] = Field(default_factory=list)
    markdown: str | None = None
    qna: str | bool | None = None
    extensionDependencies: list[str] = Field(default_factory=list)
    extensionPack: list[str] = Field(default_factory=list)
    extensionKind: str | list[str] | None = None
    activationEvents: list[str] = Field(default_factory=list)
    contributes: dict[str, Any] = Field(default_factory=dict)
    scripts: dict[str, str] = Field(default_factory=dict)
    dependencies: dict[str, str] = Field(default_factory=dict)
    devDependencies: dict[str, str] = Field(default_factory=dict)

    def contributions(self, name: str) -> list[Any]:
        value = self.contributes.get(name)
        return list(value) if isinstance(value, list) else []

    def localizations(self) -> list[Localization]:
        return [Localization.model_validate(raw) for raw in self.contributions("localizations")]



class PackageOptions(BaseModel):
    """Per-run packaging options (what the CLI collects)."""
    model_config = ConfigDict(extra="forbid")

    cwd: str | None = None
    packagePath: str | None = None
    baseContentUrl: str | None = None
    baseImagesUrl: str | None = None
    useYarn: bool = False
    dependencyEntryPoints: list[str] | None = None
    ignoreFile: str | None = None
