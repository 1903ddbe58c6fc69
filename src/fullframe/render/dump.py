"""Dump text layout: header row plus one row per decoded frame.

Header::

    Frame_Num,Time(sec),Qual_Wd_1,Qual_Wd_2,0800,0004,...,

Row::

    003901,41523.250000,000,255,0A1B,FFFF,...,

Frame-tag fields are decimal (frame ``%06d``, time ``%04.6f``, quality
bytes ``%03d``); word values are fixed-width hex from ``render_hex``.
Every field, including the last, is followed by the delimiter.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from fullframe.render.hexdump import render_hex

TAG_COLUMNS = ("Frame_Num", "Time(sec)", "Qual_Wd_1", "Qual_Wd_2")


def format_header(word_indices: Sequence[int], delimiter: str = ",") -> str:
    tag = "".join(f"{name}{delimiter}" for name in TAG_COLUMNS)
    words = "".join(f"{w:04d}{delimiter}" for w in word_indices)
    return tag + words


def format_rows(
    frame_numbers: NDArray[np.int64],
    times: NDArray[np.float64],
    quality: NDArray[np.uint8],
    values: NDArray[np.generic],
    element_size_bytes: int,
    delimiter: str = ",",
) -> list[str]:
    """Format decoded columns as dump rows, in row order."""
    hex_lines = render_hex(values, element_size_bytes=element_size_bytes, delimiter=delimiter)

    d = delimiter
    rows = []
    for fn, t, (q_hi, q_lo), hex_line in zip(
        frame_numbers.tolist(), times.tolist(), quality.tolist(), hex_lines
    ):
        rows.append(f"{fn:06d}{d}{t:04.6f}{d}{q_hi:03d}{d}{q_lo:03d}{d}{hex_line}")
    return rows
