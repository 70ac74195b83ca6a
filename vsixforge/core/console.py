# vsixforge/core/console.py
from __future__ import annotations
import asyncio
import os
import sys

from vsixforge.app.settings import settingsBool

__all__ = ["TESTS_ENV_VAR", "isInteractive", "read"]


TESTS_ENV_VAR = "VSIXFORGE_TESTS"



def isInteractive() -> bool:
    if os.environ.get(TESTS_ENV_VAR):
        return False
    if settingsBool("prompt.assumeYes", False):
        return False
    try:
        return sys.stdout.isatty() and sys.stdin.isatty()
    except (AttributeError, ValueError):
        # Detached or closed streams
        return False



async def read(prompt: str) -> str:
    """
    Ask the user a question on the terminal.

    Non-interactive runs (tests, CI, piped output, `prompt.assumeYes`) answer "y".
    """
    if not isInteractive():
        return "y"
    return await asyncio.to_thread(input, prompt)
