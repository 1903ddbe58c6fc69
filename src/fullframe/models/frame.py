"""Single-frame models: the raw bytes as read, and the decoded record."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field, field_validator, model_validator

from fullframe.models.geometry import FrameGeometry


class RawFrame(BaseModel):
    """Exactly one frame of bytes, split into data and tag regions."""

    model_config = {"frozen": True}

    geometry: FrameGeometry
    data: bytes = Field(repr=False)

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_bytes(cls, v: object) -> bytes:
        if isinstance(v, (bytearray, memoryview)):
            return bytes(v)
        if isinstance(v, bytes):
            return v
        raise ValueError(f"Expected bytes-like, got {type(v)}")

    @model_validator(mode="after")
    def _validate_size(self) -> RawFrame:
        expected = self.geometry.frame_size_bytes
        if len(self.data) != expected:
            raise ValueError(
                f"Raw frame must be exactly {expected} bytes, got {len(self.data)}"
            )
        return self

    @property
    def data_region(self) -> bytes:
        return self.data[: self.geometry.data_region_bytes]

    @property
    def tag_region(self) -> bytes:
        return self.data[self.geometry.data_region_bytes :]

    @property
    def quality_bytes(self) -> bytes:
        return self.tag_region[:2]

    @property
    def time_bytes(self) -> bytes:
        return self.tag_region[2:]


class DecodedFrame(BaseModel):
    """One decoded frame: number, time of day, quality bytes and word values."""

    model_config = {"frozen": True}

    frame_number: int
    time_of_day_s: float = Field(description="Seconds since midnight; NaN if the time field was bad")
    quality_high: Annotated[int, Field(ge=0, le=0xFF)]
    quality_low: Annotated[int, Field(ge=0, le=0xFF)]
    values: tuple[int, ...]
    time_valid: bool = True

    @property
    def quality(self) -> tuple[int, int]:
        return self.quality_high, self.quality_low
