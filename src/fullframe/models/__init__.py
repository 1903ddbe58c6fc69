"""Typed data models for full frame geometry, frames and decoded results."""

from fullframe.models.geometry import FrameGeometry, compute_geometry
from fullframe.models.window import ReadPlan, select_window
from fullframe.models.frame import DecodedFrame, RawFrame
from fullframe.models.batch import FrameBatch
from fullframe.models.result import TelemetryResult

__all__ = [
    "FrameGeometry",
    "compute_geometry",
    "ReadPlan",
    "select_window",
    "RawFrame",
    "DecodedFrame",
    "FrameBatch",
    "TelemetryResult",
]
