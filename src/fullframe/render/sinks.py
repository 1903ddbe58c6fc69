"""Text sinks — where dump lines go.

The decode core never writes to a global stream; callers hand it a list of
sinks.  A sink may cap the number of data rows it accepts (the console
preview shows only the first 30) and may skip the header (file dumps opened
in append mode).
"""

from __future__ import annotations

import abc
import sys
from collections.abc import Iterable
from enum import StrEnum
from pathlib import Path
from typing import TextIO

import structlog

log = structlog.get_logger(__name__)

CONSOLE_PREVIEW_ROWS = 30


class WriteMode(StrEnum):
    OVERWRITE = "overwrite"
    APPEND = "append"

    @property
    def file_mode(self) -> str:
        return "a" if self is WriteMode.APPEND else "w"


class TextSink(abc.ABC):
    """Line-oriented text destination with optional row cap and header."""

    def __init__(
        self,
        name: str,
        max_rows: int | None = None,
        include_header: bool = True,
    ) -> None:
        self.name = name
        self.max_rows = max_rows
        self.include_header = include_header
        self.rows_written = 0

    # ------------------------------------------------------------------ #
    #  Lifecycle                                                          #
    # ------------------------------------------------------------------ #

    def open(self) -> None:
        """Acquire the underlying stream.  Called once before any write."""

    @abc.abstractmethod
    def _write(self, text: str) -> None: ...

    @abc.abstractmethod
    def flush(self) -> None: ...

    @abc.abstractmethod
    def close(self) -> None: ...

    def __enter__(self) -> TextSink:
        self.open()
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    #  Writing                                                            #
    # ------------------------------------------------------------------ #

    @property
    def accepts_rows(self) -> bool:
        return self.max_rows is None or self.rows_written < self.max_rows

    def write_header(self, header: str) -> None:
        if self.include_header:
            self._write(header + "\n")

    def write_rows(self, lines: Iterable[str]) -> int:
        """Write data rows up to the sink's cap; returns how many were taken."""
        taken = 0
        for line in lines:
            if not self.accepts_rows:
                break
            self._write(line + "\n")
            self.rows_written += 1
            taken += 1
        return taken


class StreamSink(TextSink):
    """Writes to an already-open text stream, which it never closes."""

    def __init__(
        self,
        stream: TextIO,
        name: str = "stream",
        max_rows: int | None = None,
        include_header: bool = True,
    ) -> None:
        super().__init__(name, max_rows=max_rows, include_header=include_header)
        self.stream = stream

    def _write(self, text: str) -> None:
        self.stream.write(text)

    def flush(self) -> None:
        self.stream.flush()

    def close(self) -> None:
        self.flush()


class FileSink(TextSink):
    """Writes to a file, overwriting or appending.  The header is skipped on append."""

    def __init__(
        self,
        path: str | Path,
        write_mode: WriteMode | str = WriteMode.OVERWRITE,
        name: str = "file",
        max_rows: int | None = None,
    ) -> None:
        self.path = Path(path)
        self.write_mode = WriteMode(write_mode)
        super().__init__(
            name,
            max_rows=max_rows,
            include_header=self.write_mode is WriteMode.OVERWRITE,
        )
        self._fh: TextIO | None = None

    def open(self) -> None:
        if self._fh is not None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = open(self.path, self.write_mode.file_mode, encoding="utf-8", newline="\n")
        log.debug("sink.opened", sink=self.name, path=str(self.path), mode=str(self.write_mode))

    def _write(self, text: str) -> None:
        if self._fh is None:
            self.open()
        assert self._fh is not None
        self._fh.write(text)

    def flush(self) -> None:
        if self._fh is not None:
            self._fh.flush()

    def close(self) -> None:
        if self._fh is None:
            return
        try:
            self._fh.flush()
        finally:
            self._fh.close()
            self._fh = None
            log.debug("sink.closed", sink=self.name, path=str(self.path), rows=self.rows_written)


def console_sink(stream: TextIO | None = None, max_rows: int | None = CONSOLE_PREVIEW_ROWS) -> StreamSink:
    """The console preview sink: header plus the first 30 rows on stdout."""
    return StreamSink(stream or sys.stdout, name="console", max_rows=max_rows)
