"""Example 01 — Decode a strided window of a full frame file.

Scenario
--------
An RF link recorder has produced a full frame file: 900 sixteen-bit words
per frame, each frame followed by two quality bytes and a BCD time tag.
We want to:
  1. Pull the frame ID (word 800) and a handful of telemetry words
  2. Only look at every 4th frame from frame 3901 onwards
  3. Preview the first rows on the console and keep a full hex dump
  4. Archive the decoded frames to Parquet for later analysis

Run this script from the project root::

    python examples/01_decode_full_frame.py

It writes a synthetic recording into a temporary directory and decodes it.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import numpy as np
import pyarrow.parquet as pq

from fullframe import DecodeOptions, FullFrameError, decode
from fullframe.observability.logging import configure_logging
from fullframe.plugins.loaders.parquet import ParquetLoader, ParquetLoaderConfig

WORD_SIZE_BITS = 16
FRAME_WORD_COUNT = 900
GET_WORDS = [800, 4, 64, 508, 509, 900]


# --------------------------------------------------------------------------- #
#  1. Generate a synthetic recording                                           #
# --------------------------------------------------------------------------- #


def generate_recording(output_path: Path, n_frames: int = 4500) -> None:
    """Write ``n_frames`` frames with a counter in word 800 and a 10 ms clock.

    Frame layout (1808 bytes):
      bytes 0..1799    — 900 big-endian uint16 words
      bytes 1800..1801 — quality high / low
      bytes 1802..1807 — packed BCD time of day, HHMMSS.ffffff
    """
    rng = np.random.default_rng(2024)
    words = rng.integers(0, 1 << 16, size=(n_frames, FRAME_WORD_COUNT), dtype=np.uint16)
    words[:, 799] = np.arange(1, n_frames + 1, dtype=np.uint16)

    quality = np.zeros((n_frames, 2), dtype=np.uint8)
    quality[:, 0] = 0xA5
    quality[::97, 1] = 0x01  # occasional sync slip flag

    start_us = (13 * 3600 + 5 * 60) * 1_000_000
    times = np.array([_bcd(start_us + 10_000 * k) for k in range(n_frames)], dtype=np.uint8)

    frames = np.concatenate([words.astype(">u2").view(np.uint8), quality, times], axis=1)
    output_path.write_bytes(frames.tobytes())
    print(f"[gen] Wrote {n_frames} frames ({output_path.stat().st_size:,} bytes) to {output_path}")


def _bcd(total_us: int) -> list[int]:
    hours, rem = divmod(total_us, 3_600_000_000)
    minutes, rem = divmod(rem, 60_000_000)
    seconds, micros = divmod(rem, 1_000_000)
    digits = f"{hours:02d}{minutes:02d}{seconds:02d}{micros:06d}"
    return [(int(digits[i]) << 4) | int(digits[i + 1]) for i in range(0, 12, 2)]


# --------------------------------------------------------------------------- #
#  2. Decode                                                                   #
# --------------------------------------------------------------------------- #


def main() -> None:
    configure_logging(level="INFO", fmt="console")

    with tempfile.TemporaryDirectory(prefix="fullframe_example_") as tmpdir:
        tmp = Path(tmpdir)
        ff_path = tmp / "generic_telemetry_rf_link_file.ff"
        dump_path = tmp / "hexdump.txt"
        parquet_path = tmp / "frames.parquet"

        generate_recording(ff_path)

        options = DecodeOptions(
            get_words=GET_WORDS,
            first_frame=3901,
            last_frame=100000,
            frame_stride=4,
            dump_file=dump_path,
            write_mode="w",
            console_preview=True,
        )

        try:
            result = decode(
                ff_path,
                FRAME_WORD_COUNT,
                WORD_SIZE_BITS,
                options,
                loaders=[ParquetLoader(ParquetLoaderConfig(path=parquet_path))],
            )
        except FullFrameError as exc:
            print(f"Decode failed: {exc}")
            return

        print(f"\n{result!r}")
        print(f"  frames read      : {result.metadata['frames_read']}")
        print(f"  stopped at EOF   : {result.metadata['truncated']}")
        print(f"  first frame IDs  : {result.values[:5, 0].tolist()}")
        print(f"  time span (s)    : {result.times[0]:.2f} .. {result.times[-1]:.2f}")
        print(f"  dump lines       : {len(dump_path.read_text().splitlines())}")

        table = pq.read_table(parquet_path)
        print(f"  parquet          : {table.num_rows} rows, cols={table.schema.names}")

        for stage_name, stage in result.metadata["metrics"]["stages"].items():
            print(f"  {stage_name:<18}: {stage['busy_s']:.3f}s busy, {stage['frames_per_s']:,.0f} frames/s")


if __name__ == "__main__":
    main()
