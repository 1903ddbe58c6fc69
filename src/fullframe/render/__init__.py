"""Text rendering: fixed-width hex dumps and the sinks they are written to."""

from fullframe.render.dump import format_header, format_rows
from fullframe.render.hexdump import render_hex, write_hex
from fullframe.render.sinks import FileSink, StreamSink, TextSink, WriteMode, console_sink

__all__ = [
    "format_header",
    "format_rows",
    "render_hex",
    "write_hex",
    "TextSink",
    "StreamSink",
    "FileSink",
    "WriteMode",
    "console_sink",
]
