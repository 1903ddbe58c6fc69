"""Frame window selection — turns first/last/stride into a concrete read plan."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field

from fullframe.errors import InvalidRange
from fullframe.models.geometry import FrameGeometry


class ReadPlan(BaseModel):
    """Where to start reading, how much to read per frame, and how much to skip.

    ``frame_count`` is advisory: the reader stops early if the source runs
    out and reports the number of frames actually read.
    """

    model_config = {"frozen": True}

    first_frame: Annotated[int, Field(ge=1)]
    last_frame: Annotated[int, Field(ge=1)]
    stride: Annotated[int, Field(ge=1)]
    frame_count: Annotated[int, Field(ge=0)]
    start_offset: Annotated[int, Field(ge=0)]
    read_size: Annotated[int, Field(gt=0)]
    skip_bytes: Annotated[int, Field(ge=0)]

    @property
    def planned_bytes(self) -> int:
        return self.frame_count * self.read_size

    def frame_number(self, k: int) -> int:
        """1-based frame number of the ``k``-th (0-based) frame in the plan."""
        return self.first_frame + self.stride * k


def select_window(
    total_source_bytes: int,
    geometry: FrameGeometry,
    first_frame: int | None = None,
    last_frame: int | None = None,
    stride: int | None = None,
) -> ReadPlan:
    """Resolve the requested frame range against a source of known length."""
    frame_size = geometry.frame_size_bytes
    first = 1 if first_frame is None else first_frame
    last = geometry.complete_frames(total_source_bytes) if last_frame is None else last_frame
    step = 1 if stride is None else stride

    if first < 1:
        raise InvalidRange(f"first_frame must be >= 1, got {first}")
    if step < 1:
        raise InvalidRange(f"frame stride must be >= 1, got {step}")
    if last < first:
        raise InvalidRange(f"last_frame ({last}) is before first_frame ({first})")

    start_offset = (first - 1) * frame_size
    if start_offset >= total_source_bytes:
        raise InvalidRange(
            f"first_frame {first} starts at byte {start_offset}, "
            f"beyond the end of a {total_source_bytes}-byte source"
        )

    return ReadPlan(
        first_frame=first,
        last_frame=last,
        stride=step,
        frame_count=(last - (first - 1)) // step,
        start_offset=start_offset,
        read_size=frame_size,
        skip_bytes=(step - 1) * frame_size,
    )
