"""
Full Frame Telemetry Reader
~~~~~~~~~~~~~~~~~~~~~~~~~~~

Decode fixed-geometry "full frame" binary telemetry files into columnar
records and render the decoded words as fixed-width ASCII hex dumps.
"""

from fullframe.__version__ import __version__
from fullframe.api import DecodeOptions, decode
from fullframe.errors import (
    DecodeCancelled,
    FullFrameError,
    IndexOutOfRange,
    InvalidGeometry,
    InvalidRange,
    MalformedTimeField,
    ValueOverflow,
)
from fullframe.models.result import TelemetryResult
from fullframe.render.hexdump import render_hex, write_hex

__all__ = [
    "__version__",
    "decode",
    "DecodeOptions",
    "TelemetryResult",
    "render_hex",
    "write_hex",
    "FullFrameError",
    "InvalidGeometry",
    "InvalidRange",
    "IndexOutOfRange",
    "MalformedTimeField",
    "ValueOverflow",
    "DecodeCancelled",
]
