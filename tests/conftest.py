"""Shared pytest fixtures for the fullframe test suite."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from fullframe.models.geometry import FrameGeometry, compute_geometry
from fullframe.observability.logging import configure_logging


# --------------------------------------------------------------------------- #
#  Helpers: build full frames as raw bytes                                     #
# --------------------------------------------------------------------------- #


def bcd_time_bytes(hours: int = 0, minutes: int = 0, seconds: int = 0, micros: int = 0) -> bytes:
    """Pack a time of day into the six-byte BCD tag field."""
    digits = f"{hours:02d}{minutes:02d}{seconds:02d}{micros:06d}"
    return bytes((int(digits[i]) << 4) | int(digits[i + 1]) for i in range(0, 12, 2))


def make_frame(
    words: list[int],
    word_size_bytes: int = 2,
    quality: tuple[int, int] = (0, 0),
    time_bytes: bytes | None = None,
) -> bytes:
    """Build one full frame: big-endian words, two quality bytes, BCD time."""
    data = b"".join(w.to_bytes(word_size_bytes, "big") for w in words)
    if time_bytes is None:
        time_bytes = bcd_time_bytes()
    return data + bytes(quality) + time_bytes


def frame_words(frame_number: int, frame_word_count: int) -> list[int]:
    """Deterministic word values for synthetic frame ``frame_number``."""
    return [(frame_number * 100 + w) & 0xFFFF for w in range(1, frame_word_count + 1)]


def synthetic_frames(n_frames: int, frame_word_count: int = 4) -> bytes:
    """``n_frames`` 16-bit frames whose contents identify the frame.

    Frame ``k`` carries ``frame_words(k, ...)``, quality ``(k & 0xFF, 0xA5)``
    and time of day ``k + 0.25`` seconds.
    """
    out = bytearray()
    for k in range(1, n_frames + 1):
        out += make_frame(
            frame_words(k, frame_word_count),
            quality=(k & 0xFF, 0xA5),
            time_bytes=bcd_time_bytes(k // 3600, k // 60 % 60, k % 60, 250_000),
        )
    return bytes(out)


def write_ff_file(path: Path, n_frames: int, frame_word_count: int = 4) -> Path:
    path.write_bytes(synthetic_frames(n_frames, frame_word_count))
    return path


# --------------------------------------------------------------------------- #
#  Fixtures                                                                    #
# --------------------------------------------------------------------------- #


@pytest.fixture
def example_frame() -> bytes:
    """Two 16-bit words (1, 2), quality 0xAA/0xBB, time 12:34:56."""
    return bytes([0x00, 0x01, 0x00, 0x02, 0xAA, 0xBB, 0x12, 0x34, 0x56, 0x00, 0x00, 0x00])


@pytest.fixture
def example_geometry() -> FrameGeometry:
    return compute_geometry(16, 2)


@pytest.fixture
def ff_geometry() -> FrameGeometry:
    return compute_geometry(16, 4)


@pytest.fixture
def ff_file(tmp_path: Path) -> Path:
    """A 20-frame file of four 16-bit words per frame."""
    return write_ff_file(tmp_path / "telemetry.ff", n_frames=20)


@pytest.fixture(autouse=True)
def _quiet_logging() -> Iterator[None]:
    """Keep log lines on stderr so stdout assertions only see dump text."""
    configure_logging(level="WARNING")
    yield
