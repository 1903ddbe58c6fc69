"""Hex dump loader — writes decoded frames as delimiter-separated text.

Rows go to every configured sink: an optional console preview (header plus
the first 30 rows) and an optional dump file (header unless appending, then
every row).  Callers may add their own ``TextSink`` instances as well.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import structlog
from pydantic import BaseModel, Field

from fullframe.core.base import Loader
from fullframe.core.registry import registry
from fullframe.models.batch import FrameBatch
from fullframe.render.dump import format_header, format_rows
from fullframe.render.sinks import (
    CONSOLE_PREVIEW_ROWS,
    FileSink,
    TextSink,
    WriteMode,
    console_sink,
)

log = structlog.get_logger(__name__)


class HexDumpLoaderConfig(BaseModel):
    dump_file: Path | None = Field(default=None, description="Full text dump destination")
    write_mode: WriteMode = WriteMode.OVERWRITE
    console: bool = Field(default=False, description="Preview the first rows on stdout")
    console_rows: Annotated[int, Field(ge=0)] = CONSOLE_PREVIEW_ROWS
    delimiter: str = ","
    header_words: list[int] | None = Field(
        default=None,
        description="Word indices for the header row; if set the header is written at setup",
    )


@registry.loader("hexdump")
class HexDumpLoader(Loader[HexDumpLoaderConfig]):
    """Write frame number, time, quality and hex word values to text sinks."""

    config_class = HexDumpLoaderConfig

    def __init__(
        self,
        config: HexDumpLoaderConfig,
        sinks: list[TextSink] | None = None,
    ) -> None:
        super().__init__(config)
        self._extra_sinks = list(sinks or [])
        self.sinks: list[TextSink] = []
        self._header_written = False

    def setup(self) -> None:
        sinks: list[TextSink] = []
        if self.config.console:
            sinks.append(console_sink(max_rows=self.config.console_rows))
        if self.config.dump_file is not None:
            sinks.append(FileSink(self.config.dump_file, write_mode=self.config.write_mode))
        sinks.extend(self._extra_sinks)

        self.sinks = []
        for sink in sinks:
            sink.open()
            self.sinks.append(sink)

        self._header_written = False
        if self.config.header_words is not None:
            self._write_header(self.config.header_words)

    def load(self, batch: FrameBatch) -> None:
        if not self._header_written:
            self._write_header(batch.word_indices)

        active = [s for s in self.sinks if s.accepts_rows]
        if not active or not len(batch):
            return

        n = min(len(batch), self._rows_wanted(active, len(batch)))
        assert batch.times is not None and batch.quality is not None and batch.values is not None
        rows = format_rows(
            batch.frame_numbers[:n],
            batch.times[:n],
            batch.quality[:n],
            batch.values[:n],
            element_size_bytes=batch.geometry.word_size_bytes,
            delimiter=self.config.delimiter,
        )
        for sink in active:
            sink.write_rows(rows)
            sink.flush()

    def teardown(self) -> None:
        first_error: Exception | None = None
        for sink in self.sinks:
            try:
                sink.close()
            except Exception as exc:
                log.error("hexdump.sink_close_failed", sink=sink.name, error=str(exc))
                if first_error is None:
                    first_error = exc
        self.sinks = []
        if first_error is not None:
            raise first_error

    def _write_header(self, word_indices: list[int] | tuple[int, ...]) -> None:
        header = format_header(word_indices, self.config.delimiter)
        for sink in self.sinks:
            sink.write_header(header)
        self._header_written = True

    @staticmethod
    def _rows_wanted(sinks: list[TextSink], available: int) -> int:
        wanted = 0
        for sink in sinks:
            if sink.max_rows is None:
                return available
            wanted = max(wanted, sink.max_rows - sink.rows_written)
        return wanted
