"""Full frame extractor — reads strided windows of whole frames from a file or stream.

The frame window is resolved against the source length in ``setup()``, so an
impossible selection (first frame past end of file, last before first, ...)
fails before any downstream loader opens its output.
"""

from __future__ import annotations

import contextlib
import threading
from pathlib import Path
from typing import Annotated, BinaryIO, Iterator

from pydantic import BaseModel, Field

from fullframe.core.base import Extractor
from fullframe.core.registry import registry
from fullframe.models.batch import FrameBatch
from fullframe.models.geometry import FrameGeometry, compute_geometry
from fullframe.models.window import ReadPlan, select_window
from fullframe.reader import DEFAULT_CHUNK_FRAMES, BinaryFrameReader, open_source, source_size


class FullFrameExtractorConfig(BaseModel):
    path: Path | None = Field(
        default=None,
        description="Full frame file; omit when a stream is handed to the extractor",
    )
    frame_word_count: int = Field(description="Data words per frame")
    word_size_bits: int = Field(description="Bits per data word")
    first_frame: int | None = Field(default=None, description="1-based; default 1")
    last_frame: int | None = Field(default=None, description="Default: last complete frame")
    frame_stride: int | None = Field(default=None, description="Read every Nth frame; default 1")
    chunk_frames: Annotated[int, Field(gt=0)] = DEFAULT_CHUNK_FRAMES


@registry.extractor("fullframe")
class FullFrameExtractor(Extractor[FullFrameExtractorConfig]):
    """Yield FrameBatches of raw frames in file order, ``chunk_frames`` at a time."""

    config_class = FullFrameExtractorConfig

    def __init__(
        self,
        config: FullFrameExtractorConfig,
        source: BinaryIO | None = None,
    ) -> None:
        super().__init__(config)
        self._source = source
        self._stack: contextlib.ExitStack | None = None
        self._active = False
        self.plan: ReadPlan | None = None
        self.reader: BinaryFrameReader | None = None

    @property
    def geometry(self) -> FrameGeometry:
        return compute_geometry(self.config.word_size_bits, self.config.frame_word_count)

    @property
    def frames_read(self) -> int:
        return self.reader.frames_read if self.reader else 0

    @property
    def truncated(self) -> bool:
        return self.reader.truncated if self.reader else False

    def validate_config(self) -> None:
        compute_geometry(self.config.word_size_bits, self.config.frame_word_count)
        if self.config.path is None and self._source is None:
            raise ValueError("FullFrameExtractor needs either config.path or a source stream")

    def setup(self) -> None:
        stack = contextlib.ExitStack()
        try:
            if self._source is not None:
                fh, size = self._source, source_size(self._source)
            else:
                assert self.config.path is not None
                fh, size = stack.enter_context(open_source(self.config.path))
            self.plan = select_window(
                size,
                self.geometry,
                first_frame=self.config.first_frame,
                last_frame=self.config.last_frame,
                stride=self.config.frame_stride,
            )
        except BaseException:
            stack.close()
            raise
        self._stack = stack
        self.reader = BinaryFrameReader(fh, self.plan, chunk_frames=self.config.chunk_frames)
        self._active = True

    def teardown(self) -> None:
        self._active = False
        if self._stack is not None:
            self._stack.close()
            self._stack = None

    def extract(self, cancel: threading.Event | None = None) -> Iterator[FrameBatch]:
        owned = not self._active
        if owned:
            self.setup()
        assert self.reader is not None
        try:
            geometry = self.geometry
            source = str(self.config.path) if self.config.path else "<stream>"
            for numbers, raw in self.reader.read_chunks(cancel):
                yield FrameBatch(
                    geometry=geometry,
                    frame_numbers=numbers,
                    raw=raw,
                    metadata={"source": source, "extractor": "fullframe"},
                )
        finally:
            if owned:
                self.teardown()
