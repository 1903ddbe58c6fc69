"""Decode one ``RawFrame`` into a ``DecodedFrame``."""

from __future__ import annotations

from collections.abc import Sequence

from fullframe.decode.bcd_time import decode_bcd_time
from fullframe.decode.quality import extract_quality
from fullframe.decode.words import extract_words, validate_word_indices
from fullframe.errors import MalformedTimeField
from fullframe.models.frame import DecodedFrame, RawFrame


def decode_frame(
    raw: RawFrame,
    frame_number: int,
    word_indices: Sequence[int] | None = None,
) -> DecodedFrame:
    geometry = raw.geometry
    words = validate_word_indices(word_indices, geometry.frame_word_count)
    high, low = extract_quality(raw.tag_region)
    try:
        tod = decode_bcd_time(raw.time_bytes)
    except MalformedTimeField as exc:
        raise exc.for_frame(frame_number) from exc
    return DecodedFrame(
        frame_number=frame_number,
        time_of_day_s=tod,
        quality_high=high,
        quality_low=low,
        values=extract_words(raw.data_region, words, geometry.word_size_bytes),
    )
