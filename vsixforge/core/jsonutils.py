# vsixforge/core/jsonutils.py
from __future__ import annotations

import dataclasses
import json
import math
import os
from typing import Any

__all__ = ["toJsonSafe", "safeJsonDumps"]



def toJsonSafe(value: Any) -> Any:
    """
    Fallback conversion for values `json` cannot encode on its own.

    Paths become strings, dataclasses (Asset, FileEntry) and pydantic models
    become dicts, bytes are reported by size only, exceptions by type and
    message. Anything else is `repr`'d.
    """
    if isinstance(value, os.PathLike):
        return os.fspath(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return {"bytes": len(value)}
    if isinstance(value, BaseException):
        return {"type": type(value).__name__, "message": str(value)}
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {field.name: getattr(value, field.name) for field in dataclasses.fields(value)}
    if hasattr(value, "model_dump"):
        return value.model_dump(exclude_none=True)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return repr(value)



def _replaceNonFinite(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, dict):
        return {str(key): _replaceNonFinite(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_replaceNonFinite(item) for item in value]
    return value



def safeJsonDumps(obj: object) -> str:
    """Compact one-line JSON that never raises for odd log payloads."""
    try:
        return json.dumps(obj, ensure_ascii=False, allow_nan=False, separators=(",", ":"), default=toJsonSafe)
    except (ValueError, TypeError):
        # NaN/inf or non-string keys somewhere in the payload
        return json.dumps(_replaceNonFinite(obj), ensure_ascii=False, separators=(",", ":"), default=toJsonSafe)
