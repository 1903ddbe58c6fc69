"""Binary frame reader — strided, chunked reads of whole frames from a seekable source.

Reading stops quietly at end of file: a trailing partial frame is dropped and
``frames_read`` reports how many whole frames were actually returned.  This
keeps the reader usable against files that are still being written.
"""

from __future__ import annotations

import contextlib
import io
import threading
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

import numpy as np
import structlog
from numpy.typing import NDArray

from fullframe.errors import DecodeCancelled
from fullframe.models.window import ReadPlan

log = structlog.get_logger(__name__)

DEFAULT_CHUNK_FRAMES = 4096
_MB = 1024**2

FrameChunk = tuple[NDArray[np.int64], NDArray[np.uint8]]


def source_size(source: BinaryIO) -> int:
    """Total length of a seekable source, leaving its position unchanged."""
    pos = source.tell()
    end = source.seek(0, io.SEEK_END)
    source.seek(pos, io.SEEK_SET)
    return end


@contextlib.contextmanager
def open_source(path: str | Path) -> Iterator[tuple[BinaryIO, int]]:
    """Open a full frame file read-only and yield ``(handle, size_bytes)``."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Full frame file not found: {path}")
    with open(path, "rb") as fh:
        size = source_size(fh)
        log.info("reader.opened", path=str(path), size_mb=round(size / _MB, 1))
        yield fh, size


class BinaryFrameReader:
    """Pull the frames described by a ``ReadPlan`` from ``source``.

    Frames are read strictly in file order, ``chunk_frames`` at a time.
    """

    def __init__(
        self,
        source: BinaryIO,
        plan: ReadPlan,
        chunk_frames: int = DEFAULT_CHUNK_FRAMES,
    ) -> None:
        if chunk_frames < 1:
            raise ValueError(f"chunk_frames must be >= 1, got {chunk_frames}")
        self.source = source
        self.plan = plan
        self.chunk_frames = chunk_frames
        self.frames_read = 0
        self.truncated = False

    def read_chunks(self, cancel: threading.Event | None = None) -> Iterator[FrameChunk]:
        """Yield ``(frame_numbers, raw)`` pairs, ``raw`` holding one frame per row.

        Raises ``DecodeCancelled`` if ``cancel`` is set before a chunk is read.
        """
        plan = self.plan
        self.frames_read = 0
        self.truncated = False
        self.source.seek(plan.start_offset, io.SEEK_SET)

        log.info(
            "reader.start",
            first_frame=plan.first_frame,
            stride=plan.stride,
            planned_frames=plan.frame_count,
            planned_mb=round(plan.planned_bytes / _MB, 1),
        )

        remaining = plan.frame_count
        while remaining > 0:
            if cancel is not None and cancel.is_set():
                raise DecodeCancelled(f"Read cancelled after {self.frames_read} frame(s)")

            wanted = min(remaining, self.chunk_frames)
            chunk = self._read_frames(wanted)
            n = len(chunk) // plan.read_size

            if n:
                numbers = plan.first_frame + plan.stride * np.arange(
                    self.frames_read, self.frames_read + n, dtype=np.int64
                )
                raw = np.frombuffer(chunk, dtype=np.uint8).reshape(n, plan.read_size)
                self.frames_read += n
                yield numbers, raw

            if n < wanted:
                self.truncated = True
                log.info(
                    "reader.truncated",
                    planned_frames=plan.frame_count,
                    frames_read=self.frames_read,
                )
                break
            remaining -= n

        log.debug("reader.complete", frames_read=self.frames_read)

    def read_all(self, cancel: threading.Event | None = None) -> FrameChunk:
        """Read the whole plan into memory at once."""
        chunks = list(self.read_chunks(cancel))
        if not chunks:
            return (
                np.zeros(0, dtype=np.int64),
                np.zeros((0, self.plan.read_size), dtype=np.uint8),
            )
        numbers = np.concatenate([c[0] for c in chunks])
        raw = np.concatenate([c[1] for c in chunks])
        return numbers, raw

    def _read_frames(self, count: int) -> bytes:
        size = self.plan.read_size
        skip = self.plan.skip_bytes

        if skip == 0:
            data = self._read_exact(count * size)
            return data[: (len(data) // size) * size]

        buf = bytearray()
        for _ in range(count):
            frame = self._read_exact(size)
            if len(frame) < size:
                break
            buf += frame
            self.source.seek(skip, io.SEEK_CUR)
        return bytes(buf)

    def _read_exact(self, n: int) -> bytes:
        """Read ``n`` bytes, or fewer only at end of file.

        Raw (unbuffered) streams may return short reads before EOF.
        """
        data = self.source.read(n)
        if not data or len(data) == n:
            return data or b""
        buf = bytearray(data)
        while len(buf) < n:
            part = self.source.read(n - len(buf))
            if not part:
                break
            buf += part
        return bytes(buf)
