# vsixforge/app/settings.py
from __future__ import annotations
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, cast

import json5
from pydantic import JsonValue

from vsixforge.core.dictpath import getByPath

logger = logging.getLogger(__name__)

__all__ = [
    "SETTINGS", "SETTINGS_ENV_VAR", "userSettingsPath", "loadUserSettings",
    "loadSettings", "deepMerge", "settings", "settingsBool",
]


SETTINGS_ENV_VAR = "VSIXFORGE_SETTINGS"
DEFAULT_USER_SETTINGS = "~/.vsixforge/settings.json5"

# Shipped defaults; a user settings file only needs the keys it changes
SETTINGS: JsonValue = {
    "__source": "VSIXFORGE_DEFAULTS",
    "resolver": {
        "npmVersionCommand": "npm -v",
        "npmListCommand": "npm list --production --parseable --depth=99999 --loglevel=error",
        "yarnListCommand": "yarn list --prod --json",
    },
    "pipeline": {"maxConcurrency": 64},
    "package": {"warnFileCount": 5000, "warnJsFileCount": 100},
    "logging": {"devMode": False, "file": None},
    "prompt": {"assumeYes": False},
}



def userSettingsPath() -> Path:
    return Path(os.environ.get(SETTINGS_ENV_VAR) or DEFAULT_USER_SETTINGS).expanduser()



def loadUserSettings() -> JsonValue:
    """
    The user's json5 settings file, or {} when there is none.

    An unreadable or malformed file is reported and then ignored, so a
    broken settings file never blocks packaging.
    """
    filePath = userSettingsPath()
    if not filePath.is_file():
        return {}

    try:
        loaded = json5.loads(filePath.read_text(encoding="utf-8"))
    except (OSError, ValueError) as err:
        logger.error("Failed to parse '%s': %s", filePath, err)
        return {}

    if not isinstance(loaded, dict):
        logger.error("Failed to parse '%s': expected an object at the top level", filePath)
        return {}
    return cast(JsonValue, loaded)



@lru_cache(maxsize=1)
def loadSettings() -> JsonValue:
    return deepMerge(SETTINGS, loadUserSettings())



def deepMerge(base: JsonValue, override: JsonValue) -> JsonValue:
    """
    New value with `override` laid over `base`.

    Objects merge key by key, recursively; any other value in `override`
    (lists included) replaces the one in `base`. Neither input is modified.
    """
    if not (isinstance(base, dict) and isinstance(override, dict)):
        return override

    merged: dict[str, JsonValue] = dict(base)
    for key, value in override.items():
        merged[key] = deepMerge(merged[key], value) if key in merged else value
    return cast(JsonValue, merged)



def settings(path: str, default: Any = None) -> Any:
    """Value at the dotted `path` of the merged settings; `default` when missing or null."""
    value = getByPath(loadSettings(), path)
    return default if value is None else value



def settingsBool(path: str, default: bool = False) -> bool:
    value = getByPath(loadSettings(), path)
    return default if value is None else bool(value)
