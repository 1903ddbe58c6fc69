"""Exception hierarchy for full frame decoding and hex rendering.

Every error raised by this package derives from ``FullFrameError`` and also
from the closest built-in exception, so callers may catch either.  I/O
failures are not wrapped: they surface as the usual ``OSError`` family.
"""

from __future__ import annotations


class FullFrameError(Exception):
    """Base class for all fullframe errors."""


class InvalidGeometry(FullFrameError, ValueError):
    """Word size or frame word count is not a positive integer."""


class InvalidRange(FullFrameError, ValueError):
    """First/last frame or stride do not describe a readable selection."""


class IndexOutOfRange(FullFrameError, IndexError):
    """A requested word index lies outside ``[1, frame_word_count]``."""

    def __init__(self, index: int, frame_word_count: int) -> None:
        self.index = index
        self.frame_word_count = frame_word_count
        super().__init__(
            f"Word index {index} is outside the frame (valid range 1..{frame_word_count})"
        )


class MalformedTimeField(FullFrameError, ValueError):
    """A packed BCD time nibble holds a value above 9."""

    def __init__(
        self,
        nibble_index: int,
        nibble_value: int,
        frame_number: int | None = None,
    ) -> None:
        self.nibble_index = nibble_index
        self.nibble_value = nibble_value
        self.frame_number = frame_number
        where = f" in frame {frame_number}" if frame_number is not None else ""
        super().__init__(
            f"Malformed BCD time field{where}: nibble {nibble_index} "
            f"has value 0x{nibble_value:X} (expected 0-9)"
        )

    def for_frame(self, frame_number: int) -> MalformedTimeField:
        """Return a copy of this error attributed to ``frame_number``."""
        return MalformedTimeField(self.nibble_index, self.nibble_value, frame_number)


class ValueOverflow(FullFrameError, OverflowError):
    """A value does not fit in the requested hex element width."""


class DecodeCancelled(FullFrameError):
    """The caller's cancellation event was set between read chunks."""
