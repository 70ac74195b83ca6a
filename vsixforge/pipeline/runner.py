# vsixforge/pipeline/runner.py
from __future__ import annotations
import asyncio
import logging
from collections.abc import Sequence

from vsixforge.app.settings import settings
from vsixforge.content.files import FileEntry
from vsixforge.core.logging import setLogContext
from vsixforge.processors.base import BaseProcessor

logger = logging.getLogger(__name__)

__all__ = ["processFile", "processFiles"]


DEFAULT_MAX_CONCURRENCY = 64



async def processFile(processors: Sequence[BaseProcessor], file: FileEntry) -> FileEntry:
    """Thread one file through every processor, in order."""
    for processor in processors:
        file = await processor.onFile(file)
    return file



async def _cancelAll(tasks: Sequence[asyncio.Task[FileEntry]]) -> None:
    for task in tasks:
        if not task.done():
            task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)



async def processFiles(
    processors: Sequence[BaseProcessor],
    files: Sequence[FileEntry],
    *,
    maxConcurrency: int | None = None,
) -> list[FileEntry]:
    """
    Run the processor pipeline over every file, then finish every processor.

    Files are processed concurrently (at most `maxConcurrency` at once); the
    result keeps input order. `onEnd` runs sequentially in processor order,
    only after the last file is done. The first failure cancels whatever is
    still running and is re-raised.
    """
    limit = maxConcurrency or int(settings("pipeline.maxConcurrency", DEFAULT_MAX_CONCURRENCY))
    semaphore = asyncio.Semaphore(max(1, limit))

    async def bounded(file: FileEntry) -> FileEntry:
        async with semaphore:
            return await processFile(processors, file)

    setLogContext(phase="process")
    tasks = [asyncio.create_task(bounded(file)) for file in files]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        await _cancelAll(tasks)
        raise

    logger.debug("Processed %d files through %d processors", len(results), len(processors))

    setLogContext(phase="finalize")
    for processor in processors:
        await processor.onEnd()

    return list(results)
