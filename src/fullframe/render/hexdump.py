"""Fixed-width ASCII hex rendering of numeric arrays.

Every element becomes exactly ``2 * element_size_bytes`` uppercase hex digits
followed by the delimiter, and each input row becomes one line.  The
function keeps no state between calls, so rendering an array in row chunks
and concatenating the results gives the same lines as a single call.
"""

from __future__ import annotations

from collections.abc import Iterable
from numbers import Integral
from pathlib import Path

import numpy as np
from numpy.typing import ArrayLike

from fullframe.errors import ValueOverflow
from fullframe.render.sinks import FileSink, WriteMode


def render_hex(
    array: ArrayLike,
    element_size_bytes: int = 2,
    delimiter: str = ",",
) -> list[str]:
    """Render a 2-D array (rows = records) as one hex line per row.

    A 1-D input is treated as a single row.

    Raises
    ------
    ValueOverflow
        If a value is negative or wider than ``element_size_bytes`` bytes.
    """
    if isinstance(element_size_bytes, bool) or not isinstance(element_size_bytes, Integral):
        raise TypeError(f"element_size_bytes must be an integer, got {element_size_bytes!r}")
    if element_size_bytes < 1:
        raise ValueError(f"element_size_bytes must be >= 1, got {element_size_bytes}")

    width = 2 * element_size_bytes
    limit = (1 << (8 * element_size_bytes)) - 1

    lines = []
    for r, row in enumerate(_as_rows(array)):
        parts = []
        for c, v in enumerate(row):
            value = _as_int(v)
            if value < 0 or value > limit:
                raise ValueOverflow(
                    f"Value {value} at row {r}, column {c} does not fit in "
                    f"{element_size_bytes} byte(s) (max 0x{limit:X})"
                )
            parts.append(f"{value:0{width}X}{delimiter}")
        lines.append("".join(parts))
    return lines


def write_hex(
    path: str | Path,
    lines: Iterable[str],
    write_mode: WriteMode | str = WriteMode.OVERWRITE,
) -> int:
    """Write rendered lines to ``path``; returns the number of lines written."""
    with FileSink(path, write_mode=write_mode) as sink:
        return sink.write_rows(lines)


def _as_rows(array: ArrayLike) -> list[list[object]]:
    arr = np.asarray(array)
    if arr.ndim == 0:
        return [[arr.item()]]
    if arr.ndim == 1:
        return [arr.tolist()]
    if arr.ndim == 2:
        return arr.tolist()
    raise ValueError(f"Expected a 1-D or 2-D array, got {arr.ndim} dimensions")


def _as_int(v: object) -> int:
    if isinstance(v, Integral):
        return int(v)
    if isinstance(v, float):
        if not v.is_integer():
            raise ValueError(f"Cannot hex-render non-integral value {v!r}")
        return int(v)
    raise TypeError(f"Cannot hex-render value of type {type(v).__name__}")
