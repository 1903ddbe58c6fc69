"""Full frame geometry — byte-level layout derived from word count and word size.

Every frame is a data region of ``frame_word_count`` big-endian words followed
by an 8-byte tag region::

    [ word 1 | word 2 | ... | word N ][ qual hi | qual lo | 6 bytes BCD time ]

Each word occupies ``ceil(word_size_bits / 8)`` whole bytes, padded on the
left with zero bits.
"""

from __future__ import annotations

import math
from numbers import Real
from typing import Annotated

from pydantic import BaseModel, Field

from fullframe.errors import InvalidGeometry

TAG_REGION_BYTES = 8
QUALITY_BYTES = 2
TIME_BYTES = 6


class FrameGeometry(BaseModel):
    """Byte layout of one full frame."""

    model_config = {"frozen": True}

    word_size_bits: Annotated[int, Field(gt=0)]
    frame_word_count: Annotated[int, Field(gt=0)]

    @property
    def word_size_bytes(self) -> int:
        return math.ceil(self.word_size_bits / 8)

    @property
    def data_region_bytes(self) -> int:
        return self.frame_word_count * self.word_size_bytes

    @property
    def tag_region_bytes(self) -> int:
        return TAG_REGION_BYTES

    @property
    def frame_size_bytes(self) -> int:
        """Total bytes per frame (data region + tag region)."""
        return self.data_region_bytes + TAG_REGION_BYTES

    @property
    def quality_slice(self) -> slice:
        start = self.data_region_bytes
        return slice(start, start + QUALITY_BYTES)

    @property
    def time_slice(self) -> slice:
        start = self.data_region_bytes + QUALITY_BYTES
        return slice(start, start + TIME_BYTES)

    def complete_frames(self, total_bytes: int) -> int:
        """Number of whole frames contained in ``total_bytes``."""
        return total_bytes // self.frame_size_bytes


def compute_geometry(word_size_bits: object, frame_word_count: object) -> FrameGeometry:
    """Derive the frame layout, raising ``InvalidGeometry`` for bad inputs."""
    bits = _positive_int("word_size_bits", word_size_bits)
    count = _positive_int("frame_word_count", frame_word_count)
    return FrameGeometry(word_size_bits=bits, frame_word_count=count)


def _positive_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidGeometry(f"{name} must be an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidGeometry(f"{name} must be integral, got {value!r}")
    as_int = int(value)
    if as_int != value:
        raise InvalidGeometry(f"{name} must be integral, got {value!r}")
    if as_int <= 0:
        raise InvalidGeometry(f"{name} must be positive, got {value!r}")
    return as_int
