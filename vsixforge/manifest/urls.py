# vsixforge/manifest/urls.py
from __future__ import annotations
import re

from .model import RepositoryRef

__all__ = [
    "TRUSTED_SVG_SOURCES", "isHostTrusted", "getUrl",
    "getRepositoryUrl", "isGitHubRepository",
]


# Hosts allowed to serve SVG images (badges) in README/CHANGELOG and manifest badges.
TRUSTED_SVG_SOURCES: frozenset[str] = frozenset({
    "api.bintray.com",
    "api.travis-ci.com",
    "api.travis-ci.org",
    "app.fossa.io",
    "badge.buildkite.com",
    "badge.fury.io",
    "badge.waffle.io",
    "badgen.net",
    "badges.frapsoft.com",
    "badges.gitter.im",
    "badges.greenkeeper.io",
    "cdn.travis-ci.com",
    "cdn.travis-ci.org",
    "ci.appveyor.com",
    "circleci.com",
    "cla.opensource.microsoft.com",
    "codacy.com",
    "codeclimate.com",
    "codecov.io",
    "coveralls.io",
    "david-dm.org",
    "deepscan.io",
    "dev.azure.com",
    "docs.rs",
    "flat.badgen.net",
    "gemnasium.com",
    "githost.io",
    "gitlab.com",
    "godoc.org",
    "goreportcard.com",
    "img.shields.io",
    "isitmaintained.com",
    "marketplace.visualstudio.com",
    "nodesecurity.io",
    "opencollective.com",
    "snyk.io",
    "travis-ci.com",
    "travis-ci.org",
    "visualstudio.com",
    "vsmarketplacebadge.apphb.com",
    "www.bithound.io",
    "www.versioneye.com",
})

_SHORTHAND_REPO_RE = re.compile(r"^[^/]+/[^/]+$")
_GITHUB_REPO_RE = re.compile(r"^https://github\.com/|^git@github\.com:")



def isHostTrusted(host: str | None) -> bool:
    return (host or "").lower() in TRUSTED_SVG_SOURCES



def getUrl(value: str | RepositoryRef | None) -> str | None:
    if not value:
        return None
    if isinstance(value, str):
        return value
    return value.url



def getRepositoryUrl(value: str | RepositoryRef | None) -> str | None:
    """Repository URL; "owner/repo" shorthand expands to the GitHub clone URL."""
    result = getUrl(value)
    if result and _SHORTHAND_REPO_RE.match(result):
        return f"https://github.com/{result}.git"
    return result



def isGitHubRepository(repository: str | None) -> bool:
    return _GITHUB_REPO_RE.search(repository or "") is not None
