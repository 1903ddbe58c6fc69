"""Frame decoder — turns the raw bytes of a FrameBatch into decoded columns.

For every frame the decoder extracts the requested data words, the two
quality bytes and the packed BCD time of day.  Frames are independent, so
with ``workers > 1`` a batch is cut into contiguous row slices decoded on a
thread pool.  Each slice writes only its own rows of the preallocated output
columns, which keeps the result in frame order without any locking.
"""

from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor
from enum import StrEnum
from functools import cached_property
from typing import Annotated

import numpy as np
import structlog
from pydantic import BaseModel, Field

from fullframe.core.base import Transformer
from fullframe.core.registry import registry
from fullframe.decode.bcd_time import decode_bcd_time, decode_bcd_time_columns
from fullframe.decode.quality import extract_quality_columns
from fullframe.decode.words import extract_word_columns, validate_word_indices
from fullframe.errors import MalformedTimeField
from fullframe.models.batch import FrameBatch
from fullframe.models.geometry import FrameGeometry, compute_geometry

log = structlog.get_logger(__name__)


class BadTimePolicy(StrEnum):
    RAISE = "raise"
    MARK = "mark"


class FrameDecoderConfig(BaseModel):
    frame_word_count: int
    word_size_bits: int
    get_words: list[int] | None = Field(
        default=None,
        description="1-based word indices, in output order; default is every word",
    )
    workers: Annotated[int, Field(ge=1)] = 1
    min_rows_per_worker: Annotated[int, Field(gt=0)] = 1024
    on_bad_time: BadTimePolicy = Field(
        default=BadTimePolicy.RAISE,
        description="'raise' aborts on a malformed time field; 'mark' flags the frame and continues",
    )


@registry.transformer("frame_decoder")
class FrameDecoder(Transformer[FrameDecoderConfig]):
    """Decode words, quality bytes and time of day for every frame in a batch."""

    config_class = FrameDecoderConfig

    def __init__(self, config: FrameDecoderConfig) -> None:
        super().__init__(config)
        self._pool: ThreadPoolExecutor | None = None

    @cached_property
    def geometry(self) -> FrameGeometry:
        return compute_geometry(self.config.word_size_bits, self.config.frame_word_count)

    @cached_property
    def word_indices(self) -> tuple[int, ...]:
        return validate_word_indices(self.config.get_words, self.geometry.frame_word_count)

    def validate_config(self) -> None:
        validate_word_indices(self.config.get_words, self.geometry.frame_word_count)

    def setup(self) -> None:
        if self.config.workers > 1 and self._pool is None:
            self._pool = ThreadPoolExecutor(
                max_workers=self.config.workers, thread_name_prefix="ff-decode"
            )

    def teardown(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def transform(self, batch: FrameBatch) -> FrameBatch:
        if batch.geometry != self.geometry:
            raise ValueError(
                f"Batch geometry {batch.geometry!r} does not match decoder geometry {self.geometry!r}"
            )
        batch.allocate(self.word_indices)

        slices = self._partition(len(batch))
        if self._pool is None or len(slices) < 2:
            for rows in slices:
                self._decode_rows(batch, rows)
        else:
            futures = [self._pool.submit(self._decode_rows, batch, rows) for rows in slices]
            for future in futures:
                future.result()

        self._check_times(batch)
        return batch

    # ------------------------------------------------------------------ #
    #  Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _partition(self, n_frames: int) -> list[slice]:
        """Split ``n_frames`` rows into at most ``workers`` contiguous slices."""
        if n_frames == 0:
            return []
        parts = min(self.config.workers, math.ceil(n_frames / self.config.min_rows_per_worker))
        size = math.ceil(n_frames / max(parts, 1))
        return [slice(start, min(start + size, n_frames)) for start in range(0, n_frames, size)]

    def _decode_rows(self, batch: FrameBatch, rows: slice) -> None:
        g = self.geometry
        raw = batch.raw[rows]
        assert batch.values is not None and batch.quality is not None
        assert batch.times is not None and batch.time_valid is not None

        batch.values[rows] = extract_word_columns(
            raw[:, : g.data_region_bytes], self.word_indices, g.word_size_bytes
        )
        batch.quality[rows] = extract_quality_columns(raw[:, g.data_region_bytes :])
        times, valid = decode_bcd_time_columns(raw[:, g.time_slice])
        batch.times[rows] = times
        batch.time_valid[rows] = valid

    def _check_times(self, batch: FrameBatch) -> None:
        assert batch.time_valid is not None
        bad_rows = np.flatnonzero(~batch.time_valid)
        if bad_rows.size == 0:
            return

        first_bad = int(bad_rows[0])
        frame_number = int(batch.frame_numbers[first_bad])
        if self.config.on_bad_time == BadTimePolicy.RAISE:
            try:
                decode_bcd_time(batch.time_region[first_bad].tobytes())
            except MalformedTimeField as exc:
                raise exc.for_frame(frame_number) from None

        log.warning(
            "decoder.bad_time",
            frames=int(bad_rows.size),
            first_bad_frame=frame_number,
        )
