"""TelemetryResult — the columnar aggregate returned by ``decode()``."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from fullframe.decode.words import word_value_dtype
from fullframe.models.batch import FrameBatch, columns_to_dataframe, value_column_names
from fullframe.models.frame import DecodedFrame
from fullframe.models.geometry import FrameGeometry


@dataclass(frozen=True)
class TelemetryResult:
    """Decoded frames as read-only columns, one row per frame in file order.

    ``values`` has one column per requested word, in request order
    (duplicates included).
    """

    geometry: FrameGeometry
    word_indices: tuple[int, ...]
    frame_numbers: NDArray[np.int64]
    times: NDArray[np.float64]
    quality: NDArray[np.uint8]
    values: NDArray[np.generic]
    time_valid: NDArray[np.bool_]
    metadata: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for arr in (self.frame_numbers, self.times, self.quality, self.values, self.time_valid):
            arr.flags.writeable = False

    # ------------------------------------------------------------------ #
    #  Construction                                                       #
    # ------------------------------------------------------------------ #

    @classmethod
    def empty(
        cls,
        geometry: FrameGeometry,
        word_indices: Sequence[int],
        metadata: dict[str, object] | None = None,
    ) -> TelemetryResult:
        return cls(
            geometry=geometry,
            word_indices=tuple(word_indices),
            frame_numbers=np.zeros(0, dtype=np.int64),
            times=np.zeros(0, dtype=np.float64),
            quality=np.zeros((0, 2), dtype=np.uint8),
            values=np.zeros(
                (0, len(word_indices)), dtype=word_value_dtype(geometry.word_size_bytes)
            ),
            time_valid=np.zeros(0, dtype=np.bool_),
            metadata=dict(metadata or {}),
        )

    @classmethod
    def from_batches(
        cls,
        geometry: FrameGeometry,
        word_indices: Sequence[int],
        batches: Sequence[FrameBatch],
        metadata: dict[str, object] | None = None,
    ) -> TelemetryResult:
        """Concatenate decoded batches, preserving their order."""
        decoded = [b for b in batches if len(b)]
        if not decoded:
            return cls.empty(geometry, word_indices, metadata)
        for b in decoded:
            if not b.decoded:
                raise ValueError(f"Cannot aggregate an undecoded batch: {b!r}")
        return cls(
            geometry=geometry,
            word_indices=tuple(word_indices),
            frame_numbers=np.concatenate([b.frame_numbers for b in decoded]),
            times=np.concatenate([b.times for b in decoded]),  # type: ignore[misc]
            quality=np.concatenate([b.quality for b in decoded]),  # type: ignore[misc]
            values=np.concatenate([b.values for b in decoded]),  # type: ignore[misc]
            time_valid=np.concatenate([b.time_valid for b in decoded]),  # type: ignore[misc]
            metadata=dict(metadata or {}),
        )

    # ------------------------------------------------------------------ #
    #  Access                                                             #
    # ------------------------------------------------------------------ #

    @property
    def frame_count(self) -> int:
        return int(self.frame_numbers.shape[0])

    @property
    def word_count(self) -> int:
        return len(self.word_indices)

    def frame(self, row: int) -> DecodedFrame:
        return DecodedFrame(
            frame_number=int(self.frame_numbers[row]),
            time_of_day_s=float(self.times[row]),
            quality_high=int(self.quality[row, 0]),
            quality_low=int(self.quality[row, 1]),
            values=tuple(int(v) for v in self.values[row]),
            time_valid=bool(self.time_valid[row]),
        )

    def frames(self) -> Iterator[DecodedFrame]:
        for row in range(self.frame_count):
            yield self.frame(row)

    def value_column_names(self) -> list[str]:
        return value_column_names(self.word_indices)

    # ------------------------------------------------------------------ #
    #  DataFrame export                                                   #
    # ------------------------------------------------------------------ #

    def to_dataframe(self) -> pd.DataFrame:
        """Return a wide DataFrame with one row per frame."""
        return columns_to_dataframe(
            self.word_indices,
            self.frame_numbers,
            self.times,
            self.time_valid,
            self.quality,
            self.values,
        )

    def __len__(self) -> int:
        return self.frame_count

    def __repr__(self) -> str:
        return (
            f"TelemetryResult(frames={self.frame_count}, words={self.word_count}, "
            f"word_size_bits={self.geometry.word_size_bits}, "
            f"metadata_keys={list(self.metadata.keys())})"
        )
