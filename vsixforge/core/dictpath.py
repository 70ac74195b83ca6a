# vsixforge/core/dictpath.py
from __future__ import annotations
import re
from collections.abc import Mapping
from typing import Any

__all__ = ["splitPath", "getByPath", "hasPath"]


# Unescaped dot; "\." keeps a literal dot inside a key
_SEGMENT_SEPARATOR_RE = re.compile(r"(?<!\\)\.")
_MISSING = object()



def splitPath(path: str) -> list[str]:
    """
    "resolver.npmListCommand" -> ["resolver", "npmListCommand"].

    Raises ValueError for an empty path or an empty segment ("a..b", ".a").
    """
    if not isinstance(path, str) or not path:
        raise ValueError("Settings path must be a non-empty string")

    parts = [part.replace("\\.", ".") for part in _SEGMENT_SEPARATOR_RE.split(path)]
    if any(part == "" for part in parts):
        raise ValueError(f"Settings path '{path}' contains an empty segment")
    return parts



def getByPath(tree: Any, path: str, default: Any = None) -> Any:
    """Value at the dotted `path` inside nested mappings, or `default` when any hop is missing."""
    try:
        parts = splitPath(path)
    except ValueError:
        return default

    current = tree
    for part in parts:
        if not isinstance(current, Mapping) or part not in current:
            return default
        current = current[part]
    return current



def hasPath(tree: Any, path: str) -> bool:
    return getByPath(tree, path, _MISSING) is not _MISSING
