"""End-to-end tests for ``decode()``."""

from __future__ import annotations

import io
import threading
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
from pydantic import ValidationError

from fullframe import (
    DecodeCancelled,
    DecodeOptions,
    IndexOutOfRange,
    InvalidGeometry,
    InvalidRange,
    MalformedTimeField,
    decode,
)
from fullframe.observability.hooks import HookManager
from fullframe.plugins.loaders.hdf5 import HDF5Loader, HDF5LoaderConfig
from fullframe.plugins.loaders.parquet import ParquetLoader, ParquetLoaderConfig
from fullframe.render.sinks import StreamSink, WriteMode
from tests.conftest import frame_words, make_frame, synthetic_frames


class TestDecodeOptions:
    def test_defaults(self) -> None:
        opts = DecodeOptions()
        assert opts.get_words is None
        assert opts.first_frame is None
        assert opts.last_frame is None
        assert opts.frame_stride is None
        assert opts.dump_file is None
        assert opts.write_mode is WriteMode.OVERWRITE
        assert not opts.wants_text_output

    def test_original_key_spellings(self) -> None:
        opts = DecodeOptions(
            getwords=[3, 1], firstframe=2, lastframe=9, framestride=3, dumpfile="d.txt", writemethod="a"
        )
        assert opts.get_words == [3, 1]
        assert opts.first_frame == 2
        assert opts.last_frame == 9
        assert opts.frame_stride == 3
        assert opts.dump_file == Path("d.txt")
        assert opts.write_mode is WriteMode.APPEND
        assert opts.wants_text_output

    def test_unknown_option_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DecodeOptions(get_word=[1])

    def test_bad_write_mode(self) -> None:
        with pytest.raises(ValidationError):
            DecodeOptions(write_mode="rewrite")


class TestDecode:
    def test_example_frame(self, tmp_path: Path, example_frame: bytes) -> None:
        path = tmp_path / "one.ff"
        path.write_bytes(example_frame)
        result = decode(path, frame_word_count=2, word_size_bits=16)
        assert result.frame_count == 1
        assert result.values.tolist() == [[1, 2]]
        assert result.quality.tolist() == [[0xAA, 0xBB]]
        assert result.times.tolist() == [45296.0]
        assert result.frame_numbers.tolist() == [1]

    def test_word_order_and_duplicates(self, tmp_path: Path, example_frame: bytes) -> None:
        path = tmp_path / "one.ff"
        path.write_bytes(example_frame)
        result = decode(path, 2, 16, get_words=[2, 2, 1])
        assert result.values.tolist() == [[2, 2, 1]]
        assert result.word_indices == (2, 2, 1)

    def test_window_and_stride(self, ff_file: Path) -> None:
        result = decode(ff_file, 4, 16, DecodeOptions(first_frame=3, last_frame=20, frame_stride=5))
        # (last - (first - 1)) // stride frames: 18 // 5 == 3
        assert result.frame_numbers.tolist() == [3, 8, 13]
        assert result.values[:, 0].tolist() == [frame_words(k, 4)[0] for k in (3, 8, 13)]
        assert result.metadata["planned_frames"] == 3
        assert result.metadata["truncated"] is False

    def test_truncated_source(self, tmp_path: Path) -> None:
        path = tmp_path / "short.ff"
        path.write_bytes(make_frame([1, 2]) + make_frame([3, 4])[:6])
        result = decode(path, 2, 16, last_frame=2)
        assert result.frame_count == 1
        assert result.metadata["truncated"] is True
        assert result.metadata["planned_frames"] == 2

    def test_chunked_and_parallel_match(self, tmp_path: Path) -> None:
        path = tmp_path / "big.ff"
        path.write_bytes(synthetic_frames(300))
        single = decode(path, 4, 16)
        chunked = decode(path, 4, 16, chunk_frames=7, workers=3)
        assert np.array_equal(single.values, chunked.values)
        assert np.array_equal(single.frame_numbers, chunked.frame_numbers)
        assert np.array_equal(single.times, chunked.times)

    def test_stream_source(self) -> None:
        result = decode(io.BytesIO(synthetic_frames(4)), 4, 16, {"getwords": [4]})
        assert result.values[:, 0].tolist() == [104, 204, 304, 404]
        assert result.metadata["source"] == "<stream>"

    def test_dump_file(self, tmp_path: Path, example_frame: bytes) -> None:
        path = tmp_path / "one.ff"
        path.write_bytes(example_frame)
        dump = tmp_path / "hexdump.txt"
        decode(path, 2, 16, dump_file=dump)
        assert dump.read_text() == (
            "Frame_Num,Time(sec),Qual_Wd_1,Qual_Wd_2,0001,0002,\n"
            "000001,45296.000000,170,187,0001,0002,\n"
        )

    def test_dump_append(self, tmp_path: Path, ff_file: Path) -> None:
        dump = tmp_path / "hexdump.txt"
        decode(ff_file, 4, 16, first_frame=1, last_frame=2, dump_file=dump)
        decode(ff_file, 4, 16, first_frame=3, last_frame=4, dump_file=dump, write_mode="append")
        lines = dump.read_text().splitlines()
        assert len(lines) == 5
        assert [line[:6] for line in lines[1:]] == ["000001", "000002", "000003", "000004"]

    def test_console_preview(self, ff_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        decode(ff_file, 4, 16, console_preview=True)
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 21
        assert lines[0] == "Frame_Num,Time(sec),Qual_Wd_1,Qual_Wd_2,0001,0002,0003,0004,"

    def test_caller_sinks(self, tmp_path: Path) -> None:
        path = tmp_path / "big.ff"
        path.write_bytes(synthetic_frames(45))
        buf = io.StringIO()
        decode(path, 4, 16, sinks=[StreamSink(buf, max_rows=30)], chunk_frames=10)
        assert len(buf.getvalue().splitlines()) == 31

    def test_extra_loader(self, tmp_path: Path, ff_file: Path) -> None:
        out = tmp_path / "frames.parquet"
        decode(ff_file, 4, 16, loaders=[ParquetLoader(ParquetLoaderConfig(path=out))], get_words=[1])
        df = pd.read_parquet(out)
        assert df["word_0001"].tolist() == [frame_words(k, 4)[0] for k in range(1, 21)]

    def test_hooks(self, ff_file: Path) -> None:
        hooks = HookManager()
        decoded: list[int] = []
        hooks.on("batch.decoded")(lambda batch: decoded.append(len(batch)))
        decode(ff_file, 4, 16, hooks=hooks, chunk_frames=6)
        assert decoded == [6, 6, 6, 2]

    def test_metrics_in_metadata(self, ff_file: Path) -> None:
        result = decode(ff_file, 4, 16, chunk_frames=8)
        metrics = result.metadata["metrics"]
        assert metrics["frames"] == 20
        assert metrics["batches"] == 3
        assert metrics["stages"]["FullFrameExtractor"]["frames"] == 20
        assert metrics["stages"]["FrameDecoder"]["calls"] == 3
        assert metrics["stages"]["FrameDecoder"]["failures"] == 0

    def test_to_dataframe(self, ff_file: Path) -> None:
        df = decode(ff_file, 4, 16, get_words=[2]).to_dataframe()
        assert len(df) == 20
        assert df["qual_lo"].unique().tolist() == [0xA5]


class TestDecodeErrors:
    def test_invalid_geometry_before_io(self, tmp_path: Path) -> None:
        dump = tmp_path / "dump.txt"
        with pytest.raises(InvalidGeometry):
            decode(tmp_path / "missing.ff", 0, 16, dump_file=dump)
        assert not dump.exists()

    def test_bad_word_before_io(self, tmp_path: Path, ff_file: Path) -> None:
        dump = tmp_path / "dump.txt"
        with pytest.raises(IndexOutOfRange):
            decode(ff_file, 4, 16, get_words=[5], dump_file=dump)
        assert not dump.exists()

    @pytest.mark.parametrize(
        "window",
        [
            {"first_frame": 0},
            {"frame_stride": 0},
            {"first_frame": 10, "last_frame": 9},
            {"first_frame": 21},
        ],
    )
    def test_invalid_range_leaves_dump_untouched(
        self, tmp_path: Path, ff_file: Path, window: dict[str, int]
    ) -> None:
        dump = tmp_path / "dump.txt"
        dump.write_text("previous run\n")
        with pytest.raises(InvalidRange):
            decode(ff_file, 4, 16, dump_file=dump, **window)
        assert dump.read_text() == "previous run\n"

    def test_failing_extra_loader_leaves_dump_untouched(self, tmp_path: Path, ff_file: Path) -> None:
        dump = tmp_path / "dump.txt"
        dump.write_text("previous run\n")
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("")
        archive = HDF5Loader(HDF5LoaderConfig(path=blocker / "frames.h5"))
        with pytest.raises(OSError):
            decode(ff_file, 4, 16, dump_file=dump, loaders=[archive])
        assert dump.read_text() == "previous run\n"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            decode(tmp_path / "missing.ff", 4, 16)

    def test_malformed_time(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.ff"
        path.write_bytes(make_frame([1, 2]) + make_frame([1, 2], time_bytes=bytes([0, 0, 0, 0, 0xA0, 0])))
        with pytest.raises(MalformedTimeField) as exc_info:
            decode(path, 2, 16)
        assert exc_info.value.frame_number == 2
        assert exc_info.value.nibble_index == 9

    def test_malformed_time_marked(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.ff"
        path.write_bytes(make_frame([1, 2]) + make_frame([1, 2], time_bytes=bytes([0xEE] * 6)))
        result = decode(path, 2, 16, on_bad_time="mark")
        assert result.time_valid.tolist() == [True, False]
        assert result.frame_count == 2

    def test_cancelled(self, ff_file: Path) -> None:
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(DecodeCancelled):
            decode(ff_file, 4, 16, cancel=cancel)
