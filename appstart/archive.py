"""Streaming tar extraction from an async byte source.

Downloaded chunks are handed to a worker thread through a bounded queue; the
worker reads them as a file object with ``tarfile``'s stream mode, so the
archive is extracted while it downloads and is never fully held in memory.
"""

from __future__ import annotations

import asyncio
import contextlib
import io
import logging
import queue
import tarfile
from collections.abc import AsyncIterator
from pathlib import Path

logger = logging.getLogger(__name__)

_QUEUE_SIZE = 32
_EOF = b""


class _ChunkReader(io.RawIOBase):
    """Blocking file object over chunks pushed from the event loop."""

    def __init__(self) -> None:
        self._queue: queue.Queue[bytes] = queue.Queue(maxsize=_QUEUE_SIZE)
        self._buffer = b""
        self._eof = False
        self.abandoned = False

    def readable(self) -> bool:
        return True

    def readinto(self, target) -> int:  # type: ignore[override]
        while not self._buffer and not self._eof:
            chunk = self._queue.get()
            if chunk == _EOF:
                self._eof = True
            else:
                self._buffer = chunk
        size = min(len(target), len(self._buffer))
        target[:size] = self._buffer[:size]
        self._buffer = self._buffer[size:]
        return size

    async def feed(self, chunk: bytes) -> bool:
        """Queue *chunk* for the reader. Returns ``False`` once the reader is gone."""
        while not self.abandoned:
            try:
                self._queue.put_nowait(chunk)
                return True
            except queue.Full:
                await asyncio.sleep(0.01)
        return False

    async def finish(self) -> None:
        await self.feed(_EOF)


def _extract(reader: _ChunkReader, dest: Path) -> int:
    count = 0
    try:
        with tarfile.open(fileobj=io.BufferedReader(reader), mode="r|*") as archive:
            for member in archive:
                archive.extract(member, path=dest, filter="data")
                count += 1
    finally:
        reader.abandoned = True
    return count


async def extract_stream(chunks: AsyncIterator[bytes], dest: str | Path) -> int:
    """Extract a tar (optionally gzip/bz2/xz compressed) stream into *dest*.

    Members that would land outside *dest* are rejected by the ``"data"``
    extraction filter.

    Returns:
        The number of archive members extracted.

    Raises:
        tarfile.TarError: If the stream is not a readable tar archive.
    """
    dest_path = Path(dest)
    reader = _ChunkReader()
    worker = asyncio.create_task(asyncio.to_thread(_extract, reader, dest_path))

    try:
        async for chunk in chunks:
            if not chunk:
                continue
            if not await reader.feed(chunk):
                break
    except BaseException:
        await reader.finish()
        # The source error wins over the truncated-archive error it causes.
        with contextlib.suppress(Exception):
            await worker
        raise

    await reader.finish()
    count = await worker
    logger.debug("Extracted %d member(s) into %s", count, dest_path)
    return count
