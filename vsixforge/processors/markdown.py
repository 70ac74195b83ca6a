# vsixforge/processors/markdown.py
from __future__ import annotations
import dataclasses
import logging
import re
from html.parser import HTMLParser
from typing import NamedTuple
from urllib.parse import unquote, urlsplit

from markdown_it import MarkdownIt

from vsixforge.content.files import FileEntry, readText
from vsixforge.core.errors import ProcessorError
from vsixforge.core.paths import normalizePath, urlJoin
from vsixforge.manifest.model import Manifest, PackageOptions
from vsixforge.manifest.urls import getUrl, isGitHubRepository, isHostTrusted
from .base import Asset, BaseProcessor

__all__ = ["BaseUrls", "guessBaseUrls", "MarkdownProcessor", "ReadmeProcessor", "ChangelogProcessor"]


_PLACEHOLDER_RE = re.compile(r"This is the README for your extension ")
_MARKDOWN_PATH_RE = re.compile(r"(!?)\[([^\]\[]*|!\[[^\]\[]*\]\([^\)]+\))\]\(([^\)]+)\)")
_IMG_TAG_RE = re.compile(r"""<img.+?src=["']([/.\w\s-]+)['"].*?>""")
_ISSUE_RE = re.compile(r"(\s|\n)([\w\d_-]+/[\w\d_-]+)?#(\d+)\b", re.ASCII)
_ABSOLUTE_URL_RE = re.compile(r"^\w+://")
_GITHUB_REPO_RE = re.compile(r"github\.com/([^/]+)/([^/]+)(/|$)")
_DOT_GIT_RE = re.compile(r"\.git$", re.IGNORECASE)
_SVG_DATA_RE = re.compile(r"^image/svg", re.IGNORECASE)



class BaseUrls(NamedTuple):
    content: str
    images: str
    repository: str



def guessBaseUrls(manifest: Manifest) -> BaseUrls | None:
    """GitHub blob/raw URLs for a manifest whose repository lives on github.com."""
    repository = getUrl(manifest.repository)
    if not repository:
        return None

    mtch = _GITHUB_REPO_RE.search(repository)
    if not mtch:
        return None

    account = mtch.group(1)
    repositoryName = _DOT_GIT_RE.sub("", mtch.group(2))
    base = f"https://github.com/{account}/{repositoryName}"
    return BaseUrls(content=f"{base}/blob/master", images=f"{base}/raw/master", repository=base)



def _isRelative(link: str) -> bool:
    return not _ABSOLUTE_URL_RE.match(link) and not link.startswith("#")



class _ImageScanner(HTMLParser):
    """Collects <img src> values and counts <svg> tags of rendered markdown."""
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.imageSources: list[str] = []
        self.svgTags = 0

    def handle_starttag(self, tag, attrs):
        if tag == "img":
            self.imageSources.append(dict(attrs).get("src") or "")
        elif tag == "svg":
            self.svgTags += 1



class MarkdownProcessor(BaseProcessor):
    """
    Rewrites relative links of one markdown document into absolute URLs and
    rejects images the gallery won't display (non-HTTPS, SVG).
    """
    name = "markdown"

    def __init__(
        self,
        manifest: Manifest,
        documentName: str,
        pathPattern: re.Pattern[str],
        assetType: str,
        options: PackageOptions | None = None,
        logger: logging.Logger | None = None,
    ):
        super().__init__(manifest, logger)
        options = options or PackageOptions()

        self.documentName = documentName
        self.pathPattern = pathPattern
        self.assetType = assetType

        guess = guessBaseUrls(manifest)
        self.baseContentUrl: str | None = options.baseContentUrl or (guess.content if guess else None)
        self.baseImagesUrl: str | None = (
            options.baseImagesUrl or options.baseContentUrl or (guess.images if guess else None)
        )
        self.repositoryUrl: str | None = guess.repository if guess else None
        self.isGitHub = isGitHubRepository(self.repositoryUrl)

    def _brokenLinkError(self, kind: str, link: str | None = None) -> ProcessorError:
        what = f"The {kind} '{link}'" if link is not None else f"The {kind}"
        return ProcessorError(
            f"Couldn't detect the repository where this extension is published. {what} will be broken "
            f"in {self.documentName}. Please provide the repository URL in package.json or use the "
            "--baseContentUrl and --baseImagesUrl options."
        )

    def _rewriteLinks(self, contents: str) -> str:
        def urlReplace(mtch: re.Match[str]) -> str:
            isImage, title, link = mtch.group(1), mtch.group(2), mtch.group(3)
            isLinkRelative = _isRelative(link)

            if not self.baseContentUrl and not self.baseImagesUrl and isLinkRelative:
                raise self._brokenLinkError("image" if isImage else "link", link)

            # Link text may itself be an image
            title = _MARKDOWN_PATH_RE.sub(urlReplace, title)
            prefix = self.baseImagesUrl if isImage else self.baseContentUrl

            if not prefix or not isLinkRelative:
                return f"{isImage}[{title}]({link})"
            return f"{isImage}[{title}]({urlJoin(prefix, link)})"

        return _MARKDOWN_PATH_RE.sub(urlReplace, contents)

    def _rewriteImageTags(self, contents: str) -> str:
        def imgReplace(mtch: re.Match[str]) -> str:
            whole, link = mtch.group(0), mtch.group(1)
            isLinkRelative = _isRelative(link)

            if not self.baseImagesUrl and isLinkRelative:
                raise self._brokenLinkError("image")

            if not self.baseImagesUrl or not isLinkRelative:
                return whole
            return whole.replace(link, urlJoin(self.baseImagesUrl, link), 1)

        return _IMG_TAG_RE.sub(imgReplace, contents)

    def _linkIssues(self, contents: str) -> str:
        def issueReplace(mtch: re.Match[str]) -> str:
            whole = mtch.group(0)
            if not self.isGitHub:
                return whole

            prefix, ownerAndRepositoryName, issueNumber = mtch.group(1), mtch.group(2), mtch.group(3)
            if ownerAndRepositoryName:
                owner, repositoryName = ownerAndRepositoryName.split("/", 1)
                issueUrl = urlJoin("https://github.com", owner, repositoryName, "issues", issueNumber)
                return f"{prefix}[{owner}/{repositoryName}#{issueNumber}]({issueUrl})"

            issueUrl = urlJoin(self.repositoryUrl or "", "issues", issueNumber)
            return f"{prefix}[#{issueNumber}]({issueUrl})"

        return _ISSUE_RE.sub(issueReplace, contents)

    def _checkRenderedHtml(self, contents: str) -> None:
        html = MarkdownIt("js-default", {"html": True}).render(contents)
        scanner = _ImageScanner()
        scanner.feed(html)
        scanner.close()

        for rawSrc in scanner.imageSources:
            src = unquote(rawSrc)
            srcUrl = urlsplit(src)
            scheme = srcUrl.scheme.lower()

            if scheme == "data" and _SVG_DATA_RE.match(srcUrl.path):
                raise ProcessorError(f"SVG data URLs are not allowed in {self.documentName}: {src}")

            if scheme != "https":
                raise ProcessorError(f"Images in {self.documentName} must come from an HTTPS source: {src}")

            if srcUrl.path.lower().endswith(".svg") and not isHostTrusted(srcUrl.hostname):
                raise ProcessorError(
                    f"SVGs are restricted in {self.documentName}; please use other file image formats, "
                    f"such as PNG: {src}"
                )

        if scanner.svgTags:
            raise ProcessorError(f"SVG tags are not allowed in {self.documentName}.")

    async def onFile(self, file: FileEntry) -> FileEntry:
        path = normalizePath(file.path)
        if not self.pathPattern.match(path):
            return file

        self.assets.append(Asset(type=self.assetType, path=path))
        contents = await readText(file)

        if _PLACEHOLDER_RE.search(contents):
            raise ProcessorError(
                f"Make sure to edit the {self.documentName} file before you package or publish your extension."
            )

        contents = self._rewriteLinks(contents)
        contents = self._rewriteImageTags(contents)
        contents = self._linkIssues(contents)
        self._checkRenderedHtml(contents)

        self.logger.debug("Rewrote links in %s", path)
        return dataclasses.replace(file, contents=contents.encode("utf-8"), localPath=None)



class ReadmeProcessor(MarkdownProcessor):
    name = "readme"

    def __init__(self, manifest: Manifest, options: PackageOptions | None = None, logger: logging.Logger | None = None):
        super().__init__(
            manifest,
            "README.md",
            re.compile(r"^extension/readme\.md$", re.IGNORECASE),
            "Microsoft.VisualStudio.Services.Content.Details",
            options,
            logger,
        )



class ChangelogProcessor(MarkdownProcessor):
    name = "changelog"

    def __init__(self, manifest: Manifest, options: PackageOptions | None = None, logger: logging.Logger | None = None):
        super().__init__(
            manifest,
            "CHANGELOG.md",
            re.compile(r"^extension/changelog\.md$", re.IGNORECASE),
            "Microsoft.VisualStudio.Services.Content.Changelog",
            options,
            logger,
        )
