"""Packed BCD time-of-day decoding.

The last six bytes of every frame tag hold twelve 4-bit BCD digits, read
byte by byte, high nibble first::

    H H : M M : S S . f f f f f f
    10h 1h 10m 1m 10s 1s .1 .01 .001 .0001 .00001 .000001

Digits are accumulated in integer microseconds and divided once at the end,
so a field such as 23:59:59.999999 decodes to the float nearest 86399.999999.
"""

from __future__ import annotations

from collections.abc import Iterator

import numpy as np
from numpy.typing import NDArray

from fullframe.errors import MalformedTimeField
from fullframe.models.geometry import TIME_BYTES

TIME_FIELD_WEIGHTS_S: tuple[float, ...] = (
    36000, 3600, 600, 60, 10, 1, 0.1, 0.01, 0.001, 0.0001, 0.00001, 0.000001,
)
_WEIGHTS_US: tuple[int, ...] = (
    36_000_000_000,
    3_600_000_000,
    600_000_000,
    60_000_000,
    10_000_000,
    1_000_000,
    100_000,
    10_000,
    1_000,
    100,
    10,
    1,
)
_US_PER_S = 1_000_000


def iter_nibbles(time_bytes: bytes) -> Iterator[int]:
    for byte in time_bytes:
        yield byte >> 4
        yield byte & 0x0F


def decode_bcd_time(time_bytes: bytes) -> float:
    """Decode six packed BCD bytes to seconds of day.

    Raises
    ------
    MalformedTimeField
        If any nibble is 10-15.  ``nibble_index`` is 1-based (1 = tens of hours).
    """
    if len(time_bytes) != TIME_BYTES:
        raise ValueError(f"BCD time field requires {TIME_BYTES} bytes, got {len(time_bytes)}")
    total_us = 0
    for k, (nibble, weight) in enumerate(zip(iter_nibbles(time_bytes), _WEIGHTS_US), start=1):
        if nibble > 9:
            raise MalformedTimeField(k, nibble)
        total_us += nibble * weight
    return total_us / _US_PER_S


def decode_bcd_time_columns(
    time_bytes: NDArray[np.uint8],
) -> tuple[NDArray[np.float64], NDArray[np.bool_]]:
    """Decode an ``(n, 6)`` matrix of time fields.

    Returns the seconds-of-day column and a validity mask.  Rows holding a
    non-decimal nibble are ``NaN`` in the first and ``False`` in the second.
    """
    n_frames = time_bytes.shape[0]
    nibbles = np.empty((n_frames, 2 * TIME_BYTES), dtype=np.uint8)
    nibbles[:, 0::2] = time_bytes >> 4
    nibbles[:, 1::2] = time_bytes & 0x0F

    valid = np.all(nibbles <= 9, axis=1)
    total_us = nibbles.astype(np.int64) @ np.asarray(_WEIGHTS_US, dtype=np.int64)
    seconds = total_us / _US_PER_S
    seconds[~valid] = np.nan
    return seconds, valid
