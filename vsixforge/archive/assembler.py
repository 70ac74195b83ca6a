# vsixforge/archive/assembler.py
from __future__ import annotations

import logging
import mimetypes
import posixpath
import xml.etree.ElementTree as ET
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import jinja2

from vsixforge.content.files import FileEntry
from vsixforge.core.errors import AssemblyError
from vsixforge.processors.base import BaseProcessor

logger = logging.getLogger(__name__)

__all__ = [
    "VSIX_MANIFEST_PATH",
    "CONTENT_TYPES_PATH",
    "DEFAULT_CONTENT_TYPES",
    "mergeContributions",
    "toVsixManifest",
    "toContentTypes",
    "assembleEntries",
    "parseVsixManifest",
]


VSIX_MANIFEST_PATH = "extension.vsixmanifest"
CONTENT_TYPES_PATH = "[Content_Types].xml"

TEMPLATES_DIR = Path(__file__).parent / "templates"
VSIX_MANIFEST_TEMPLATE = "extension.vsixmanifest.j2"
CONTENT_TYPES_TEMPLATE = "content_types.xml.j2"

DEFAULT_CONTENT_TYPES: dict[str, str] = {
    ".json": "application/json",
    ".vsixmanifest": "text/xml",
}
FALLBACK_CONTENT_TYPE = "application/octet-stream"

# Common extension payloads; the interpreter's built-in table differs between
# releases for several of these (.js, .md, .ts)
PINNED_CONTENT_TYPES: dict[str, str] = {
    ".js": "application/javascript",
    ".cjs": "application/javascript",
    ".mjs": "application/javascript",
    ".ts": "video/mp2t",
    ".map": "application/json",
    ".md": "text/markdown",
    ".txt": "text/plain",
    ".css": "text/css",
    ".html": "text/html",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".wasm": "application/wasm",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
}

_VSX_NS = {"vsx": "http://schemas.microsoft.com/developer/vsx-schema/2011"}

# Built-in tables only; the host's mime.types must not change the output
_MIME_TYPES = mimetypes.MimeTypes()

# Keys every rendered manifest needs, whatever the processors contributed
_VSIX_DEFAULTS: dict[str, Any] = {
    "id": None,
    "version": None,
    "publisher": None,
    "engine": None,
    "displayName": None,
    "description": "",
    "tags": "",
    "categories": "",
    "flags": "",
    "badges": [],
    "extensionDependencies": "",
    "extensionPack": "",
    "localizedLanguages": "",
    "githubMarkdown": True,
    "enableMarketplaceQnA": None,
    "customerQnALink": None,
    "license": None,
    "icon": None,
    "assets": [],
}
_LINK_KEYS = ("repository", "bugs", "homepage", "github")
_BANNER_KEYS = ("color", "theme")



def _xmlBool(value: Any) -> str:
    return "true" if value else "false"



def _createEnvironment() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(TEMPLATES_DIR),
        autoescape=True,
        undefined=jinja2.StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["xmlbool"] = _xmlBool
    return env



_env = _createEnvironment()



def _render(templateName: str, context: Mapping[str, Any]) -> str:
    try:
        return _env.get_template(templateName).render(**context)
    except jinja2.TemplateError as err:
        raise AssemblyError(f"Failed to render '{templateName}': {err}") from err



def mergeContributions(processors: Sequence[BaseProcessor]) -> dict[str, Any]:
    """Flattened assets plus every processor's contribution, later processors winning."""
    vsix: dict[str, Any] = {"assets": [asset for processor in processors for asset in processor.assets]}
    for processor in processors:
        vsix.update(processor.manifestContribution)
    return vsix



def _normalizeVsix(vsix: Mapping[str, Any]) -> dict[str, Any]:
    context = {**_VSIX_DEFAULTS, **vsix}
    links = context.get("links") or {}
    context["links"] = {key: links.get(key) for key in _LINK_KEYS}
    banner = context.get("galleryBanner") or {}
    context["galleryBanner"] = {key: banner.get(key) for key in _BANNER_KEYS}
    context["badges"] = list(context.get("badges") or [])
    context["assets"] = list(context.get("assets") or [])
    return context



def toVsixManifest(vsix: Mapping[str, Any]) -> str:
    return _render(VSIX_MANIFEST_TEMPLATE, _normalizeVsix(vsix))



def _lookupContentType(extension: str) -> str:
    if extension in PINNED_CONTENT_TYPES:
        return PINNED_CONTENT_TYPES[extension]
    contentType, _encoding = _MIME_TYPES.guess_type(f"file{extension}", strict=False)
    return contentType or FALLBACK_CONTENT_TYPE



def toContentTypes(files: Sequence[FileEntry]) -> str:
    """`[Content_Types].xml` for the distinct extensions of `files`, first seen first."""
    extensions: dict[str, str] = {}
    for file in files:
        extension = posixpath.splitext(file.path)[1].lower()
        if extension and extension not in extensions:
            extensions[extension] = _lookupContentType(extension)

    allExtensions = {**extensions, **DEFAULT_CONTENT_TYPES}
    contentTypes = [
        {"extension": extension, "contentType": contentType}
        for extension, contentType in allExtensions.items()
    ]
    return _render(CONTENT_TYPES_TEMPLATE, {"contentTypes": contentTypes})



def assembleEntries(processors: Sequence[BaseProcessor], files: Sequence[FileEntry]) -> list[FileEntry]:
    """
    Final archive entries: manifest descriptor, content types, then `files`.

    Call only after every processor's `onEnd` has run.
    """
    vsix = mergeContributions(processors)
    manifestXml = toVsixManifest(vsix)
    contentTypesXml = toContentTypes(files)
    logger.debug("Rendered package manifest with %d assets", len(vsix["assets"]))
    return [
        FileEntry(path=VSIX_MANIFEST_PATH, contents=manifestXml.encode("utf-8")),
        FileEntry(path=CONTENT_TYPES_PATH, contents=contentTypesXml.encode("utf-8")),
        *files,
    ]



def _text(parent: ET.Element | None, tag: str) -> str | None:
    if parent is None:
        return None
    element = parent.find(f"vsx:{tag}", _VSX_NS)
    if element is None:
        return None
    return element.text or ""



def parseVsixManifest(xml: str | bytes) -> dict[str, Any]:
    """Read the identity, metadata, properties and assets back out of a rendered manifest."""
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as err:
        raise AssemblyError(f"Invalid package manifest: {err}") from err

    metadata = root.find("vsx:Metadata", _VSX_NS)
    if metadata is None:
        raise AssemblyError("Invalid package manifest: missing Metadata")

    identity = metadata.find("vsx:Identity", _VSX_NS)
    identityAttrs = dict(identity.attrib) if identity is not None else {}

    properties = {
        prop.get("Id", ""): prop.get("Value", "")
        for prop in metadata.iterfind("vsx:Properties/vsx:Property", _VSX_NS)
    }
    badges = [
        {"url": badge.get("ImgUri", ""), "href": badge.get("Link", ""), "description": badge.get("Description", "")}
        for badge in metadata.iterfind("vsx:Badges/vsx:Badge", _VSX_NS)
    ]
    assets = [
        {"type": asset.get("Type", ""), "path": asset.get("Path", "")}
        for asset in root.iterfind("vsx:Assets/vsx:Asset", _VSX_NS)
    ]

    return {
        "id": identityAttrs.get("Id"),
        "version": identityAttrs.get("Version"),
        "publisher": identityAttrs.get("Publisher"),
        "displayName": _text(metadata, "DisplayName"),
        "description": _text(metadata, "Description"),
        "tags": _text(metadata, "Tags"),
        "categories": _text(metadata, "Categories"),
        "flags": _text(metadata, "GalleryFlags"),
        "badges": badges,
        "properties": properties,
        "license": _text(metadata, "License"),
        "icon": _text(metadata, "Icon"),
        "assets": assets,
    }
