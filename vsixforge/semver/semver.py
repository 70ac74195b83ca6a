# vsixforge/semver/semver.py
from __future__ import annotations

import re
from dataclasses import dataclass, field

__all__ = [
    "SemVerVersion",
    "parseSemVerVersion",
    "isValidSemVer",
    "plainVersion",
    "PackageLabel",
    "parsePackageLabel",
    "packageNameFromLabel",
    "isRangeLabel",
]


_NUM = r"(?:0|[1-9]\d*)"
_IDENT = r"(?:0|[1-9]\d*|[0-9A-Za-z-]*[A-Za-z-][0-9A-Za-z-]*)"
_PRERELEASE = rf"(?:-(?P<prerelease>{_IDENT}(?:\.{_IDENT})*))?"
_BUILD = r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"

# Full "M.m.p[-pre][+build]" (what a manifest `version` must be)
SEMVER_PATTERN_RE = re.compile(rf"^v?(?P<major>{_NUM})\.(?P<minor>{_NUM})\.(?P<patch>{_NUM}){_PRERELEASE}{_BUILD}$")

# Same, but minor and patch may be left out ("1", "1.2")
_LOOSE_VERSION_RE = re.compile(
    rf"^v?(?P<major>{_NUM})(?:\.(?P<minor>{_NUM})(?:\.(?P<patch>{_NUM}))?)?{_PRERELEASE}{_BUILD}$"
)

_RANGE_OPERATORS_RE = re.compile(r"^(\^|~|>=|<=|>|<|=|v)+")

# One comparator of a range expression: ">=1.2.x", "^4", "*", "1.0.0-beta.1"
_RANGE_TOKEN_RE = re.compile(
    r"^(\^|~|>=|<=|>|<|=)?v?(\*|x|X|\d+)(\.(\*|x|X|\d+)){0,2}(-[0-9A-Za-z.-]+)?(\+[0-9A-Za-z.-]+)?$"
)

# A dependency label whose version part is a caret/tilde range ("lodash@^4.17.0")
RANGE_LABEL_RE = re.compile(r"@[\^~]")

# Fallback when a label can't be parsed: keep everything before the version "@"
_LABEL_STRIP_RE = re.compile(r"^((?:@[^/@]+/)?[^@]+)@.*$")



def _prereleaseKey(identifier: str) -> tuple[int, int | str]:
    # Numeric identifiers sort before alphanumeric ones
    return (0, int(identifier)) if identifier.isdigit() else (1, identifier)



@dataclass(frozen=True, order=True)
class SemVerVersion:
    """
    A parsed semantic version.

    Ordering follows semver precedence: a release sorts after its
    pre-releases and build metadata is ignored (also for equality).
    """
    sortKey: tuple = field(init=False, repr=False)
    major: int = field(compare=False)
    minor: int = field(compare=False)
    patch: int = field(compare=False)
    prerelease: tuple[str, ...] = field(default=(), compare=False)
    build: tuple[str, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        isRelease = 0 if self.prerelease else 1
        prereleaseKey = tuple(_prereleaseKey(ident) for ident in self.prerelease)
        object.__setattr__(self, "sortKey", (self.major, self.minor, self.patch, isRelease, prereleaseKey))

    @property
    def core(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text



def parseSemVerVersion(raw: str) -> SemVerVersion:
    """
    Parse "1", "1.2", "1.2.3", "v1.2.3-alpha.1+build.7" and similar.

    Missing minor/patch count as 0. Leading zeroes, empty components and
    more than three numbers are rejected with ValueError.
    """
    if not isinstance(raw, str):
        raise TypeError(f"Version must be a string, got {type(raw).__name__}")

    mtch = _LOOSE_VERSION_RE.match(raw.strip())
    if not mtch:
        raise ValueError(f"Invalid semantic version {raw!r}")

    prerelease = mtch.group("prerelease")
    build = mtch.group("build")
    return SemVerVersion(
        major=int(mtch.group("major")),
        minor=int(mtch.group("minor") or 0),
        patch=int(mtch.group("patch") or 0),
        prerelease=tuple(prerelease.split(".")) if prerelease else (),
        build=tuple(build.split(".")) if build else (),
    )



def isValidSemVer(raw: object) -> bool:
    """Strict check: a full "M.m.p[-pre][+build]" version (optional leading "v")."""
    return isinstance(raw, str) and SEMVER_PATTERN_RE.match(raw.strip()) is not None



def plainVersion(rangeText: str) -> str:
    """Strip range operators from a single-version range ("^1.50.0" -> "1.50.0")."""
    return _RANGE_OPERATORS_RE.sub("", (rangeText or "").strip())



# ------------------------------------------------------------------ #
# Package labels ("name@range")
# ------------------------------------------------------------------ #

def _isRangeExpression(rangeText: str) -> bool:
    for alternative in rangeText.split("||"):
        tokens = alternative.split()
        if not tokens and rangeText.strip():
            return False
        for token in tokens:
            if token != "-" and not _RANGE_TOKEN_RE.match(token):
                return False
    return True



@dataclass(frozen=True)
class PackageLabel:
    name: str
    # Raw range text after the version "@" ("" when the label has none)
    range: str



def parsePackageLabel(label: str) -> PackageLabel:
    """
    Split "lodash@^4.17.0" or "@types/node@18.0.0" into name and range.

    Raises ValueError for an empty or unscoped "@" name, or when the range is
    not a semver range expression (git URLs, file paths, tags).
    """
    if not isinstance(label, str) or not label.strip():
        raise ValueError(f"Invalid package label {label!r}")
    label = label.strip()

    # A leading "@" belongs to the scope
    name, sep, rangeText = label[1:].partition("@")
    name = label[0] + name
    if not sep:
        rangeText = ""

    if name == "@" or (name.startswith("@") and "/" not in name):
        raise ValueError(f"Invalid package name in label {label!r}")
    if not _isRangeExpression(rangeText):
        raise ValueError(f"Invalid version range {rangeText!r} in label {label!r}")

    return PackageLabel(name=name, range=rangeText)



def packageNameFromLabel(label: str) -> str:
    """Bare package name from a label; falls back to a regex strip when parsing fails."""
    try:
        return parsePackageLabel(label).name
    except (ValueError, TypeError):
        return _LABEL_STRIP_RE.sub(r"\1", label)



def isRangeLabel(label: str) -> bool:
    """True for labels pinned to a caret/tilde range rather than an exact version."""
    return RANGE_LABEL_RE.search(label or "") is not None
