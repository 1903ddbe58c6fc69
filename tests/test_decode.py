"""Tests for word, quality and BCD time decoding."""

from __future__ import annotations

import numpy as np
import pytest

from fullframe.decode import (
    decode_bcd_time,
    decode_bcd_time_columns,
    decode_frame,
    extract_quality,
    extract_quality_columns,
    extract_word_columns,
    extract_words,
    validate_word_indices,
    word_value_dtype,
)
from fullframe.errors import IndexOutOfRange, MalformedTimeField
from fullframe.models.frame import RawFrame
from fullframe.models.geometry import FrameGeometry, compute_geometry
from tests.conftest import bcd_time_bytes, make_frame


class TestValidateWordIndices:
    def test_default_is_every_word(self) -> None:
        assert validate_word_indices(None, 4) == (1, 2, 3, 4)

    def test_order_and_duplicates_preserved(self) -> None:
        assert validate_word_indices([3, 1, 3], 4) == (3, 1, 3)

    def test_empty_request(self) -> None:
        assert validate_word_indices([], 4) == ()

    @pytest.mark.parametrize("bad", [0, 5, -1])
    def test_out_of_range(self, bad: int) -> None:
        with pytest.raises(IndexOutOfRange) as exc_info:
            validate_word_indices([1, bad], 4)
        assert exc_info.value.index == bad
        assert exc_info.value.frame_word_count == 4

    def test_non_integer_rejected(self) -> None:
        with pytest.raises(TypeError):
            validate_word_indices([1.5], 4)  # type: ignore[list-item]


class TestExtractWords:
    def test_example_frame(self, example_frame: bytes) -> None:
        assert extract_words(example_frame[:4], [1, 2], 2) == (1, 2)

    def test_duplicates_and_order(self, example_frame: bytes) -> None:
        assert extract_words(example_frame[:4], [2, 2, 1], 2) == (2, 2, 1)

    def test_big_endian_three_byte_words(self) -> None:
        data = bytes([0x01, 0x02, 0x03, 0xFF, 0xFF, 0xFF])
        assert extract_words(data, [1, 2], 3) == (0x010203, 0xFFFFFF)

    def test_no_sign_extension(self) -> None:
        assert extract_words(b"\xff\xff", [1], 2) == (65535,)

    def test_wide_word_exact(self) -> None:
        data = bytes(range(1, 11))
        (value,) = extract_words(data, [1], 10)
        assert value == int.from_bytes(data, "big")

    def test_out_of_range(self) -> None:
        with pytest.raises(IndexOutOfRange):
            extract_words(b"\x00\x01\x00\x02", [3], 2)


class TestExtractWordColumns:
    def test_matches_scalar_path(self) -> None:
        frames = [make_frame([i, 1000 + i, 0xFFFF]) for i in range(5)]
        data = np.frombuffer(b"".join(frames), dtype=np.uint8).reshape(5, -1)
        cols = extract_word_columns(data[:, :6], [3, 1, 2, 1], 2)
        assert cols.dtype == np.uint64
        assert cols.shape == (5, 4)
        for row, frame in enumerate(frames):
            assert tuple(int(v) for v in cols[row]) == extract_words(frame[:6], [3, 1, 2, 1], 2)

    def test_full_width_uint64(self) -> None:
        top = 0xFFFF_FFFF_FFFF_FFFE
        data = np.frombuffer(top.to_bytes(8, "big"), dtype=np.uint8).reshape(1, 8)
        cols = extract_word_columns(data, [1], 8)
        assert int(cols[0, 0]) == top

    def test_wide_words_use_exact_integers(self) -> None:
        raw = bytes(range(1, 10)) + bytes([0xFF] * 9)
        data = np.frombuffer(raw, dtype=np.uint8).reshape(1, 18)
        cols = extract_word_columns(data, [2, 1], 9)
        assert cols.dtype == object
        assert cols[0, 0] == (1 << 72) - 1
        assert cols[0, 1] == int.from_bytes(bytes(range(1, 10)), "big")

    def test_no_words_requested(self) -> None:
        data = np.zeros((3, 4), dtype=np.uint8)
        assert extract_word_columns(data, [], 2).shape == (3, 0)

    def test_out_of_range(self) -> None:
        with pytest.raises(IndexOutOfRange):
            extract_word_columns(np.zeros((1, 4), dtype=np.uint8), [3], 2)

    def test_value_dtype(self) -> None:
        assert word_value_dtype(1) == np.uint64
        assert word_value_dtype(8) == np.uint64
        assert word_value_dtype(9) == np.dtype(object)


class TestBcdTime:
    def test_midnight(self) -> None:
        assert decode_bcd_time(bytes(6)) == 0.0

    def test_last_microsecond_of_day(self) -> None:
        assert decode_bcd_time(bytes([0x23, 0x59, 0x59, 0x99, 0x99, 0x99])) == 86399.999999

    def test_example_tag(self) -> None:
        assert decode_bcd_time(bytes([0x12, 0x34, 0x56, 0x00, 0x00, 0x00])) == 45296.0

    def test_fraction_digits(self) -> None:
        assert decode_bcd_time(bcd_time_bytes(0, 0, 1, 250_000)) == 1.25

    def test_malformed_nibble(self) -> None:
        with pytest.raises(MalformedTimeField) as exc_info:
            decode_bcd_time(bytes([0x00, 0x0A, 0x00, 0x00, 0x00, 0x00]))
        assert exc_info.value.nibble_index == 4
        assert exc_info.value.nibble_value == 0xA
        assert exc_info.value.frame_number is None

    def test_malformed_high_nibble(self) -> None:
        with pytest.raises(MalformedTimeField) as exc_info:
            decode_bcd_time(bytes([0xF0, 0, 0, 0, 0, 0]))
        assert exc_info.value.nibble_index == 1

    def test_wrong_length(self) -> None:
        with pytest.raises(ValueError):
            decode_bcd_time(bytes(5))

    def test_columns_match_scalar(self) -> None:
        rows = [
            bcd_time_bytes(0, 0, 0, 0),
            bytes([0x23, 0x59, 0x59, 0x99, 0x99, 0x99]),
            bcd_time_bytes(12, 34, 56, 789_012),
        ]
        seconds, valid = decode_bcd_time_columns(
            np.frombuffer(b"".join(rows), dtype=np.uint8).reshape(3, 6)
        )
        assert valid.tolist() == [True, True, True]
        assert seconds.tolist() == [decode_bcd_time(r) for r in rows]

    def test_columns_mark_invalid_rows(self) -> None:
        rows = bcd_time_bytes(0, 0, 1) + bytes([0x0B, 0, 0, 0, 0, 0])
        seconds, valid = decode_bcd_time_columns(
            np.frombuffer(rows, dtype=np.uint8).reshape(2, 6)
        )
        assert valid.tolist() == [True, False]
        assert seconds[0] == 1.0
        assert np.isnan(seconds[1])


class TestQuality:
    def test_extract(self) -> None:
        assert extract_quality(bytes([0xAA, 0xBB, 0, 0, 0, 0, 0, 0])) == (0xAA, 0xBB)

    def test_too_short(self) -> None:
        with pytest.raises(ValueError):
            extract_quality(b"\x01")

    def test_columns(self) -> None:
        tags = np.array([[1, 2, 9, 9], [3, 4, 9, 9]], dtype=np.uint8)
        q = extract_quality_columns(tags)
        assert q.dtype == np.uint8
        assert q.tolist() == [[1, 2], [3, 4]]


class TestDecodeFrame:
    def test_example_frame(self, example_frame: bytes, example_geometry: FrameGeometry) -> None:
        raw = RawFrame(geometry=example_geometry, data=example_frame)
        decoded = decode_frame(raw, frame_number=7)
        assert decoded.frame_number == 7
        assert decoded.values == (1, 2)
        assert decoded.quality_high == 0xAA
        assert decoded.quality_low == 0xBB
        assert decoded.quality == (0xAA, 0xBB)
        assert decoded.time_of_day_s == 45296.0
        assert decoded.time_valid

    def test_word_selection(self, example_frame: bytes, example_geometry: FrameGeometry) -> None:
        raw = RawFrame(geometry=example_geometry, data=example_frame)
        assert decode_frame(raw, 1, [2, 2, 1]).values == (2, 2, 1)

    def test_bad_time_reports_frame(self, example_geometry: FrameGeometry) -> None:
        frame = make_frame([1, 2], time_bytes=bytes([0, 0, 0, 0, 0, 0x0C]))
        raw = RawFrame(geometry=example_geometry, data=frame)
        with pytest.raises(MalformedTimeField) as exc_info:
            decode_frame(raw, frame_number=42)
        assert exc_info.value.frame_number == 42
        assert exc_info.value.nibble_index == 12
        assert "frame 42" in str(exc_info.value)

    def test_raw_frame_size_checked(self, example_geometry: FrameGeometry) -> None:
        with pytest.raises(ValueError):
            RawFrame(geometry=example_geometry, data=b"\x00" * 11)

    def test_raw_frame_regions(self, example_frame: bytes) -> None:
        raw = RawFrame(geometry=compute_geometry(16, 2), data=bytearray(example_frame))
        assert raw.data_region == b"\x00\x01\x00\x02"
        assert raw.quality_bytes == b"\xaa\xbb"
        assert raw.time_bytes == b"\x12\x34\x56\x00\x00\x00"
