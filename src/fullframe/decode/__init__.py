"""Bit-level decoders for the data and tag regions of a full frame."""

from fullframe.decode.bcd_time import (
    TIME_FIELD_WEIGHTS_S,
    decode_bcd_time,
    decode_bcd_time_columns,
)
from fullframe.decode.frame import decode_frame
from fullframe.decode.quality import extract_quality, extract_quality_columns
from fullframe.decode.words import (
    extract_word_columns,
    extract_words,
    validate_word_indices,
    word_value_dtype,
)

__all__ = [
    "TIME_FIELD_WEIGHTS_S",
    "decode_bcd_time",
    "decode_bcd_time_columns",
    "decode_frame",
    "extract_quality",
    "extract_quality_columns",
    "extract_words",
    "extract_word_columns",
    "validate_word_indices",
    "word_value_dtype",
]
