"""FrameBatch — the in-memory unit passed between pipeline stages."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from fullframe.decode.words import word_value_dtype
from fullframe.models.frame import RawFrame
from fullframe.models.geometry import FrameGeometry


def value_column_names(word_indices: Sequence[int]) -> list[str]:
    """``word_NNNN`` column names, suffixed ``_2``, ``_3``... for repeated words."""
    seen: dict[int, int] = {}
    names = []
    for w in word_indices:
        seen[w] = seen.get(w, 0) + 1
        suffix = f"_{seen[w]}" if seen[w] > 1 else ""
        names.append(f"word_{w:04d}{suffix}")
    return names


def columns_to_dataframe(
    word_indices: Sequence[int],
    frame_numbers: NDArray[np.int64],
    times: NDArray[np.float64],
    time_valid: NDArray[np.bool_],
    quality: NDArray[np.uint8],
    values: NDArray[np.generic],
) -> pd.DataFrame:
    """One row per frame: tag columns followed by one column per requested word."""
    df = pd.DataFrame(
        {
            "frame_num": frame_numbers,
            "time_s": times,
            "time_valid": time_valid,
            "qual_hi": quality[:, 0],
            "qual_lo": quality[:, 1],
        }
    )
    words = pd.DataFrame(values, columns=value_column_names(word_indices))
    return pd.concat([df, words], axis=1)


@dataclass
class FrameBatch:
    """A contiguous run of frames read from the source, plus decoded columns.

    The extractor fills ``frame_numbers`` and ``raw`` (one frame per row).
    The decoder calls ``allocate()`` and then writes each output row by
    index, so disjoint row slices may be filled from separate threads.
    """

    geometry: FrameGeometry
    frame_numbers: NDArray[np.int64]
    raw: NDArray[np.uint8]
    metadata: dict[str, object] = field(default_factory=dict)

    word_indices: tuple[int, ...] = ()
    times: NDArray[np.float64] | None = None
    time_valid: NDArray[np.bool_] | None = None
    quality: NDArray[np.uint8] | None = None
    values: NDArray[np.generic] | None = None

    # ------------------------------------------------------------------ #
    #  Raw views                                                          #
    # ------------------------------------------------------------------ #

    @property
    def data_region(self) -> NDArray[np.uint8]:
        return self.raw[:, : self.geometry.data_region_bytes]

    @property
    def tag_region(self) -> NDArray[np.uint8]:
        return self.raw[:, self.geometry.data_region_bytes :]

    @property
    def time_region(self) -> NDArray[np.uint8]:
        return self.raw[:, self.geometry.time_slice]

    def raw_frame(self, row: int) -> RawFrame:
        return RawFrame(geometry=self.geometry, data=self.raw[row].tobytes())

    def release_raw(self) -> None:
        """Drop the raw frame bytes once every stage has consumed them."""
        self.raw = np.zeros((len(self), 0), dtype=np.uint8)

    # ------------------------------------------------------------------ #
    #  Decoded columns                                                    #
    # ------------------------------------------------------------------ #

    def allocate(self, word_indices: Sequence[int]) -> None:
        """Preallocate one output row per frame for the requested words."""
        n = len(self)
        self.word_indices = tuple(word_indices)
        self.times = np.full(n, np.nan, dtype=np.float64)
        self.time_valid = np.zeros(n, dtype=np.bool_)
        self.quality = np.zeros((n, 2), dtype=np.uint8)
        self.values = np.zeros(
            (n, len(self.word_indices)),
            dtype=word_value_dtype(self.geometry.word_size_bytes),
        )

    @property
    def decoded(self) -> bool:
        return self.values is not None

    def to_dataframe(self) -> pd.DataFrame:
        if not self.decoded:
            raise RuntimeError("FrameBatch has not been decoded yet")
        return columns_to_dataframe(
            self.word_indices,
            self.frame_numbers,
            self.times,  # type: ignore[arg-type]
            self.time_valid,  # type: ignore[arg-type]
            self.quality,  # type: ignore[arg-type]
            self.values,  # type: ignore[arg-type]
        )

    def __len__(self) -> int:
        return int(self.frame_numbers.shape[0])

    def __repr__(self) -> str:
        first = int(self.frame_numbers[0]) if len(self) else None
        return (
            f"FrameBatch(frames={len(self)}, first_frame={first}, "
            f"decoded={self.decoded}, metadata_keys={list(self.metadata.keys())})"
        )
