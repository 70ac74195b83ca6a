# vsixforge/content/files.py
from __future__ import annotations
import asyncio
from dataclasses import dataclass
from pathlib import Path

__all__ = ["FileEntry", "readBytes", "readText"]



@dataclass(frozen=True, slots=True)
class FileEntry:
    """
    One archive entry.

    `contents` holds bytes already in memory (rendered documents, rewritten
    markdown). Otherwise `localPath` is read when the entry is needed.
    """
    path: str
    contents: bytes | None = None
    localPath: str | None = None

    def __post_init__(self):
        if self.contents is None and self.localPath is None:
            raise ValueError(f"FileEntry '{self.path}' needs either contents or a localPath")



def _readSync(entry: FileEntry) -> bytes:
    if entry.contents is not None:
        return entry.contents
    return Path(entry.localPath).read_bytes()  # type: ignore[arg-type]



async def readBytes(entry: FileEntry) -> bytes:
    if entry.contents is not None:
        return entry.contents
    return await asyncio.to_thread(_readSync, entry)



async def readText(entry: FileEntry) -> str:
    """UTF-8 text of the entry; undecodable bytes become U+FFFD."""
    data = await readBytes(entry)
    return data.decode("utf-8", errors="replace")
