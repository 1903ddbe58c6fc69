"""Frame quality field — the two leading bytes of the frame tag.

The bytes are returned as-is; interpreting individual quality bits is left
to the caller.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from fullframe.models.geometry import QUALITY_BYTES


def extract_quality(tag_region: bytes) -> tuple[int, int]:
    """Return ``(quality_high, quality_low)`` from an 8-byte frame tag."""
    if len(tag_region) < QUALITY_BYTES:
        raise ValueError(f"Frame tag too short for quality field: {len(tag_region)} bytes")
    return tag_region[0], tag_region[1]


def extract_quality_columns(tags: NDArray[np.uint8]) -> NDArray[np.uint8]:
    """Return an ``(n, 2)`` matrix of quality bytes from an ``(n, >=2)`` tag matrix."""
    return np.ascontiguousarray(tags[:, :QUALITY_BYTES], dtype=np.uint8)
