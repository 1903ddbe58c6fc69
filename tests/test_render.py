"""Tests for hex rendering, dump layout and text sinks."""

from __future__ import annotations

import io
from pathlib import Path

import numpy as np
import pytest

from fullframe.errors import ValueOverflow
from fullframe.render import (
    FileSink,
    StreamSink,
    WriteMode,
    console_sink,
    format_header,
    format_rows,
    render_hex,
    write_hex,
)


class TestRenderHex:
    def test_single_value(self) -> None:
        assert render_hex([[255]], element_size_bytes=2) == ["00FF,"]

    def test_rows_and_delimiter(self) -> None:
        lines = render_hex(np.array([[1, 2], [0xABCD, 0]]), element_size_bytes=2, delimiter=";")
        assert lines == ["0001;0002;", "ABCD;0000;"]

    def test_one_dimensional_is_one_row(self) -> None:
        assert render_hex(np.array([10, 11, 12], dtype=np.uint8), element_size_bytes=1) == ["0A,0B,0C,"]

    def test_width_follows_element_size(self) -> None:
        assert render_hex([[1]], element_size_bytes=4) == ["00000001,"]
        assert render_hex([[0xFF]], element_size_bytes=1, delimiter="") == ["FF"]

    def test_overflow(self) -> None:
        with pytest.raises(ValueOverflow):
            render_hex([[65536]], element_size_bytes=2)

    def test_negative_overflow(self) -> None:
        with pytest.raises(ValueOverflow):
            render_hex([[-1]], element_size_bytes=2)

    def test_max_value_fits(self) -> None:
        assert render_hex([[65535]], element_size_bytes=2) == ["FFFF,"]

    def test_uint64_values(self) -> None:
        arr = np.array([[0xFFFF_FFFF_FFFF_FFFF]], dtype=np.uint64)
        assert render_hex(arr, element_size_bytes=8) == ["FFFFFFFFFFFFFFFF,"]

    def test_wide_python_ints(self) -> None:
        arr = np.array([[(1 << 72) - 1]], dtype=object)
        assert render_hex(arr, element_size_bytes=9) == ["FF" * 9 + ","]

    def test_integral_floats_accepted(self) -> None:
        assert render_hex([[2.0]], element_size_bytes=1) == ["02,"]

    def test_fractional_float_rejected(self) -> None:
        with pytest.raises(ValueError):
            render_hex([[2.5]], element_size_bytes=1)

    @pytest.mark.parametrize("size", [0, -2])
    def test_bad_element_size(self, size: int) -> None:
        with pytest.raises(ValueError):
            render_hex([[1]], element_size_bytes=size)

    def test_three_dimensional_rejected(self) -> None:
        with pytest.raises(ValueError):
            render_hex(np.zeros((2, 2, 2), dtype=np.uint8))

    def test_chunked_rendering_matches_single_call(self) -> None:
        rng = np.random.default_rng(7)
        arr = rng.integers(0, 1 << 16, size=(9, 5), dtype=np.uint64)
        whole = render_hex(arr, element_size_bytes=2)
        halves = render_hex(arr[:4], element_size_bytes=2) + render_hex(arr[4:], element_size_bytes=2)
        assert halves == whole

    def test_empty_inputs(self) -> None:
        assert render_hex(np.zeros((0, 3), dtype=np.uint16)) == []
        assert render_hex(np.zeros((2, 0), dtype=np.uint16)) == ["", ""]


class TestWriteHex:
    def test_overwrite_then_append(self, tmp_path: Path) -> None:
        out = tmp_path / "hex.txt"
        assert write_hex(out, render_hex([[1], [2]], element_size_bytes=1)) == 2
        write_hex(out, render_hex([[3]], element_size_bytes=1), write_mode="append")
        assert out.read_text() == "01,\n02,\n03,\n"
        write_hex(out, ["AA,"], write_mode=WriteMode.OVERWRITE)
        assert out.read_text() == "AA,\n"


class TestDumpFormat:
    def test_header(self) -> None:
        assert format_header([800, 4, 64]) == "Frame_Num,Time(sec),Qual_Wd_1,Qual_Wd_2,0800,0004,0064,"

    def test_header_custom_delimiter(self) -> None:
        assert format_header([1], "\t") == "Frame_Num\tTime(sec)\tQual_Wd_1\tQual_Wd_2\t0001\t"

    def test_rows(self) -> None:
        rows = format_rows(
            np.array([3901, 3905], dtype=np.int64),
            np.array([41523.25, 0.5]),
            np.array([[0, 255], [7, 8]], dtype=np.uint8),
            np.array([[0x0A1B, 0xFFFF], [1, 2]], dtype=np.uint64),
            element_size_bytes=2,
        )
        assert rows == [
            "003901,41523.250000,000,255,0A1B,FFFF,",
            "003905,0.500000,007,008,0001,0002,",
        ]


class TestSinks:
    def test_stream_sink_cap(self) -> None:
        buf = io.StringIO()
        sink = StreamSink(buf, max_rows=2)
        sink.write_header("H")
        assert sink.write_rows(["a", "b", "c"]) == 2
        assert not sink.accepts_rows
        assert sink.write_rows(["d"]) == 0
        sink.close()
        assert buf.getvalue() == "H\na\nb\n"
        assert not buf.closed

    def test_console_sink_default_cap(self) -> None:
        buf = io.StringIO()
        sink = console_sink(buf)
        sink.write_header("H")
        sink.write_rows(str(i) for i in range(100))
        assert buf.getvalue().splitlines() == ["H"] + [str(i) for i in range(30)]

    def test_file_sink_append_omits_header(self, tmp_path: Path) -> None:
        out = tmp_path / "nested" / "dump.txt"
        with FileSink(out) as sink:
            sink.write_header("H")
            sink.write_rows(["r1"])
        with FileSink(out, write_mode="append") as sink:
            sink.write_header("H")
            sink.write_rows(["r2"])
        assert out.read_text() == "H\nr1\nr2\n"

    def test_file_sink_close_is_idempotent(self, tmp_path: Path) -> None:
        sink = FileSink(tmp_path / "x.txt")
        sink.open()
        sink.close()
        sink.close()

    def test_write_mode_file_modes(self) -> None:
        assert WriteMode.OVERWRITE.file_mode == "w"
        assert WriteMode("append").file_mode == "a"
        with pytest.raises(ValueError):
            WriteMode("rewrite")
