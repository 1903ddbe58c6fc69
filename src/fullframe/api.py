"""``decode()`` — the one-call entry point for reading a full frame file.

Example::

    result = decode(
        "generic_telemetry_rf_link_file.ff",
        frame_word_count=900,
        word_size_bits=16,
        options=DecodeOptions(
            get_words=[800, 4, 64, 508, 509, 900],
            first_frame=3901,
            last_frame=100000,
            frame_stride=4,
            dump_file="hexdump.txt",
        ),
    )
    result.values[:, 0]   # word 800 of every 4th frame from 3901 on
"""

from __future__ import annotations

import os
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Any, BinaryIO

from pydantic import AliasChoices, BaseModel, Field, field_validator

from fullframe.core.base import Loader
from fullframe.core.pipeline import Pipeline, PipelineConfig
from fullframe.decode.words import validate_word_indices
from fullframe.models.geometry import compute_geometry
from fullframe.models.result import TelemetryResult
from fullframe.observability.hooks import HookManager
from fullframe.plugins.extractors.frames import FullFrameExtractor, FullFrameExtractorConfig
from fullframe.plugins.loaders.hexdump import HexDumpLoader, HexDumpLoaderConfig
from fullframe.plugins.transformers.decoder import BadTimePolicy, FrameDecoder, FrameDecoderConfig
from fullframe.reader import DEFAULT_CHUNK_FRAMES
from fullframe.render.sinks import TextSink, WriteMode

Source = str | os.PathLike[str] | BinaryIO

_WRITE_MODE_ALIASES = {"w": WriteMode.OVERWRITE, "a": WriteMode.APPEND}


class DecodeOptions(BaseModel):
    """Every option ``decode()`` recognises, with its default.

    Field names also accept the spellings of the original key/value
    interface (``getwords``, ``firstframe``, ``writemethod``, ...), and
    ``write_mode`` accepts the ``"w"``/``"a"`` file permissions.
    """

    model_config = {"extra": "forbid", "populate_by_name": True}

    get_words: list[int] | None = Field(
        default=None,
        validation_alias=AliasChoices("get_words", "getwords", "getWords"),
        description="1-based word indices in output order; default every word",
    )
    first_frame: int | None = Field(
        default=None, validation_alias=AliasChoices("first_frame", "firstframe", "firstFrame")
    )
    last_frame: int | None = Field(
        default=None, validation_alias=AliasChoices("last_frame", "lastframe", "lastFrame")
    )
    frame_stride: int | None = Field(
        default=None, validation_alias=AliasChoices("frame_stride", "framestride", "frameStride")
    )
    dump_file: Path | None = Field(
        default=None, validation_alias=AliasChoices("dump_file", "dumpfile", "dumpFile")
    )
    write_mode: WriteMode = Field(
        default=WriteMode.OVERWRITE,
        validation_alias=AliasChoices("write_mode", "writemode", "writeMode", "writemethod"),
    )
    console_preview: bool = False
    delimiter: str = ","
    chunk_frames: Annotated[int, Field(gt=0)] = DEFAULT_CHUNK_FRAMES
    workers: Annotated[int, Field(ge=1)] = 1
    on_bad_time: BadTimePolicy = BadTimePolicy.RAISE

    @field_validator("write_mode", mode="before")
    @classmethod
    def _file_permission_alias(cls, v: object) -> object:
        if isinstance(v, str):
            return _WRITE_MODE_ALIASES.get(v, v)
        return v

    @property
    def wants_text_output(self) -> bool:
        return self.console_preview or self.dump_file is not None


def decode(
    source: Source,
    frame_word_count: int,
    word_size_bits: int,
    options: DecodeOptions | Mapping[str, Any] | None = None,
    *,
    sinks: list[TextSink] | None = None,
    loaders: list[Loader] | None = None,  # type: ignore[type-arg]
    hooks: HookManager | None = None,
    cancel: threading.Event | None = None,
    **overrides: Any,
) -> TelemetryResult:
    """Decode the selected frames of ``source`` into a ``TelemetryResult``.

    Parameters
    ----------
    source:
        Path of a full frame file, or an open seekable binary stream.
    frame_word_count, word_size_bits:
        Frame geometry.  Each word occupies ``ceil(word_size_bits / 8)`` bytes.
    options:
        ``DecodeOptions`` or a mapping of option names; keyword ``overrides``
        are applied on top.
    sinks:
        Extra text sinks that receive the dump alongside the console/file
        sinks selected by the options.
    loaders:
        Extra pipeline loaders (e.g. ``ParquetLoader``) fed every decoded batch.
    hooks, cancel:
        Pipeline event hooks, and an event checked between read chunks.

    Raises
    ------
    InvalidGeometry, IndexOutOfRange, InvalidRange
        Before any frame is read or any output is opened.
    MalformedTimeField
        With ``on_bad_time="raise"``, on the first frame with a non-BCD time.
    DecodeCancelled
        If ``cancel`` is set while reading.
    OSError
        If the source or a dump file cannot be opened, read or written.
    """
    opts = _resolve_options(options, overrides)
    geometry = compute_geometry(word_size_bits, frame_word_count)
    words = validate_word_indices(opts.get_words, geometry.frame_word_count)

    ext_config = FullFrameExtractorConfig(
        path=None if _is_stream(source) else Path(source),  # type: ignore[arg-type]
        frame_word_count=geometry.frame_word_count,
        word_size_bits=geometry.word_size_bits,
        first_frame=opts.first_frame,
        last_frame=opts.last_frame,
        frame_stride=opts.frame_stride,
        chunk_frames=opts.chunk_frames,
    )
    extractor = FullFrameExtractor(
        ext_config,
        source=source if _is_stream(source) else None,  # type: ignore[arg-type]
    )
    decoder = FrameDecoder(
        FrameDecoderConfig(
            frame_word_count=geometry.frame_word_count,
            word_size_bits=geometry.word_size_bits,
            get_words=list(words),
            workers=opts.workers,
            on_bad_time=opts.on_bad_time,
        )
    )

    # Caller loaders open first: the dump file is only truncated once every
    # other output has opened cleanly.
    stage_loaders: list[Loader] = list(loaders or [])  # type: ignore[type-arg]
    if opts.wants_text_output or sinks:
        stage_loaders.append(
            HexDumpLoader(
                HexDumpLoaderConfig(
                    dump_file=opts.dump_file,
                    write_mode=opts.write_mode,
                    console=opts.console_preview,
                    delimiter=opts.delimiter,
                    header_words=list(words),
                ),
                sinks=sinks,
            )
        )

    pipeline = Pipeline(
        config=PipelineConfig(name="ff-decode"),
        extractor=extractor,
        transformers=[decoder],
        loaders=stage_loaders,
        hooks=hooks,
        cancel=cancel,
    )
    run = pipeline.run()
    run.raise_for_errors()

    plan = extractor.plan
    assert plan is not None
    return TelemetryResult.from_batches(
        geometry,
        words,
        run.batches,
        metadata={
            "source": str(ext_config.path) if ext_config.path else "<stream>",
            "first_frame": plan.first_frame,
            "last_frame": plan.last_frame,
            "frame_stride": plan.stride,
            "planned_frames": plan.frame_count,
            "frames_read": extractor.frames_read,
            "truncated": extractor.truncated,
            "elapsed_s": round(run.elapsed_s, 4),
            "metrics": run.metrics,
        },
    )


def _resolve_options(
    options: DecodeOptions | Mapping[str, Any] | None,
    overrides: Mapping[str, Any],
) -> DecodeOptions:
    if options is None:
        return DecodeOptions(**overrides)
    if isinstance(options, DecodeOptions):
        if not overrides:
            return options
        return DecodeOptions(**{**options.model_dump(), **overrides})
    return DecodeOptions(**{**dict(options), **overrides})


def _is_stream(source: object) -> bool:
    return hasattr(source, "read") and hasattr(source, "seek")
