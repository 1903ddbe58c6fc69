"""Word extraction — big-endian unsigned words at any whole-byte width.

A word of ``B`` bytes at 1-based index ``w`` spans data-region bytes
``[(w-1)*B, w*B)`` and is assembled most-significant byte first::

    value = sum(byte[i] << 8 * (B - 1 - i) for i in range(B))

Values are never sign-extended and never pass through floating point.
Words up to 8 bytes wide are held in ``uint64`` columns; wider words fall
back to exact Python integers in an ``object`` array.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from numbers import Integral

import numpy as np
from numpy.typing import NDArray

from fullframe.errors import IndexOutOfRange

_MAX_NATIVE_WORD_BYTES = 8


def word_value_dtype(word_size_bytes: int) -> np.dtype:
    """Column dtype able to hold ``word_size_bytes``-wide words exactly."""
    if word_size_bytes <= _MAX_NATIVE_WORD_BYTES:
        return np.dtype(np.uint64)
    return np.dtype(object)


def validate_word_indices(
    word_indices: Iterable[int] | None,
    frame_word_count: int,
) -> tuple[int, ...]:
    """Normalise a word request, defaulting to every word in frame order.

    Order and duplicates are preserved.
    """
    if word_indices is None:
        return tuple(range(1, frame_word_count + 1))

    validated: list[int] = []
    for w in word_indices:
        if isinstance(w, bool) or not isinstance(w, Integral):
            raise TypeError(f"Word indices must be integers, got {w!r}")
        if not 1 <= w <= frame_word_count:
            raise IndexOutOfRange(int(w), frame_word_count)
        validated.append(int(w))
    return tuple(validated)


def extract_words(
    data_region: bytes,
    word_indices: Sequence[int],
    word_size_bytes: int,
) -> tuple[int, ...]:
    """Decode the requested words from one frame's data region."""
    frame_word_count = len(data_region) // word_size_bytes
    values: list[int] = []
    for w in word_indices:
        if not 1 <= w <= frame_word_count:
            raise IndexOutOfRange(w, frame_word_count)
        start = (w - 1) * word_size_bytes
        values.append(int.from_bytes(data_region[start : start + word_size_bytes], "big"))
    return tuple(values)


def extract_word_columns(
    data: NDArray[np.uint8],
    word_indices: Sequence[int],
    word_size_bytes: int,
) -> NDArray[np.generic]:
    """Decode the requested words from every row of a frame matrix.

    ``data`` holds one frame per row; only the leading data-region bytes of
    each row are addressed.  Returns an ``(n_frames, len(word_indices))``
    matrix whose column order matches ``word_indices``.
    """
    n_frames = data.shape[0]
    frame_word_count = data.shape[1] // word_size_bytes
    for w in word_indices:
        if not 1 <= w <= frame_word_count:
            raise IndexOutOfRange(w, frame_word_count)

    first_bytes = (np.asarray(word_indices, dtype=np.intp) - 1) * word_size_bytes
    dtype = word_value_dtype(word_size_bytes)

    if dtype == np.uint64:
        out = np.zeros((n_frames, len(first_bytes)), dtype=np.uint64)
        for i in range(word_size_bytes):
            out <<= np.uint64(8)
            out |= data[:, first_bytes + i].astype(np.uint64)
        return out

    out = np.zeros((n_frames, len(first_bytes)), dtype=object)
    for i in range(word_size_bytes):
        out = out * 256 + data[:, first_bytes + i].astype(object)
    return out
