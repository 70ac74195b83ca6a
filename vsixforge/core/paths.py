# vsixforge/core/paths.py
from __future__ import annotations
import os
from os import PathLike

__all__ = ["ARCHIVE_ROOT", "normalizePath", "toArchivePath", "stripArchiveRoot", "urlJoin"]


# Every project file lives under this segment inside the package
ARCHIVE_ROOT = "extension"



def normalizePath(path: str | PathLike[str]) -> str:
    """Forward-slash form of `path` (backslashes become '/')."""
    return os.fspath(path).replace("\\", "/")



def toArchivePath(relativePath: str) -> str:
    return f"{ARCHIVE_ROOT}/{normalizePath(relativePath)}"



def stripArchiveRoot(archivePath: str) -> str:
    prefix = ARCHIVE_ROOT + "/"
    normalized = normalizePath(archivePath)
    if normalized.startswith(prefix):
        return normalized[len(prefix):]
    return normalized



def urlJoin(*parts: str) -> str:
    """
    Joins URL fragments with single slashes.

    The first fragment keeps its scheme ("https://host/a" + "./b/c.png" -> "https://host/a/b/c.png").
    Leading "./" segments of later fragments are dropped; query/fragment markers are left alone.
    """
    pieces = [str(part) for part in parts if part is not None and str(part) != ""]
    if not pieces:
        return ""

    out = pieces[0].rstrip("/")
    for piece in pieces[1:]:
        while piece.startswith("./"):
            piece = piece[2:]
        piece = piece.strip("/")
        if not piece:
            continue
        if piece[0] in ("?", "#"):
            out += piece
        else:
            out += "/" + piece
    return out
