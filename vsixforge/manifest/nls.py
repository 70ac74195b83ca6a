# vsixforge/manifest/nls.py
from __future__ import annotations
import re
from collections.abc import Mapping
from typing import Any

__all__ = ["patchNLS"]


_PLACEHOLDER_RE = re.compile(r"^%([\w\d.]+)%$", re.IGNORECASE)



def _patchValue(value: Any, translations: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        mtch = _PLACEHOLDER_RE.match(value)
        if not mtch:
            return value
        return translations.get(mtch.group(1)) or value
    if isinstance(value, Mapping):
        return {key: _patchValue(item, translations) for key, item in value.items()}
    if isinstance(value, list):
        return [_patchValue(item, translations) for item in value]
    return value



def patchNLS(rawManifest: Mapping[str, Any], translations: Mapping[str, str]) -> dict[str, Any]:
    """
    Returns a deep copy of `rawManifest` with every "%key%" string replaced by
    `translations[key]`. Unknown keys keep the placeholder.
    """
    return _patchValue(rawManifest, translations)
