# vsixforge/deps/process.py
from __future__ import annotations
import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from vsixforge.core.errors import CommandError

logger = logging.getLogger(__name__)

__all__ = ["CommandResult", "runCommand"]



@dataclass(frozen=True, slots=True)
class CommandResult:
    stdout: str
    stderr: str



async def runCommand(command: str, *, cwd: str | Path | None = None) -> CommandResult:
    """
    Run a shell command and capture its output as UTF-8 text.

    Raises CommandError on a non-zero exit status. A missing executable
    surfaces the same way (the shell exits with 127).
    """
    logger.debug("Running '%s' in %s", command, cwd or os.getcwd())
    proc = await asyncio.create_subprocess_shell(
        command,
        cwd=str(cwd) if cwd is not None else None,
        env={**os.environ},
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdoutBytes, stderrBytes = await proc.communicate()
    except asyncio.CancelledError:
        # Don't leave the package manager running after a cancelled run
        if proc.returncode is None:
            proc.kill()
        raise

    stdout = stdoutBytes.decode("utf-8", errors="replace")
    stderr = stderrBytes.decode("utf-8", errors="replace")
    if proc.returncode != 0:
        raise CommandError(command, proc.returncode or -1, stderr)
    return CommandResult(stdout=stdout, stderr=stderr)
