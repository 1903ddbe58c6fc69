"""Abstract base classes for all pipeline stages.

Every stage in a decode pipeline is one of:
  - Extractor   — reads raw frames and yields FrameBatches
  - Transformer — decodes / enriches a FrameBatch in place
  - Loader      — writes a decoded FrameBatch to a sink

All stages are:
  - Typed via Pydantic config models
  - Observable via structured logging
  - Composable into a Pipeline, which calls ``setup()`` once before the
    first batch and ``teardown()`` once after the last, even on error
"""

from __future__ import annotations

import abc
import threading
import time
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel

from fullframe.models.batch import FrameBatch

ConfigT = TypeVar("ConfigT", bound=BaseModel)


class StageStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class StageResult:
    """Outcome of a single stage execution on one batch."""

    stage_name: str
    status: StageStatus
    elapsed_s: float
    records_in: int = 0
    records_out: int = 0
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.status == StageStatus.SUCCESS


class PipelineStage(abc.ABC, Generic[ConfigT]):
    """Base class for all pipeline stages.

    Subclasses must declare a ``config_class`` class attribute.
    """

    config_class: type[BaseModel]

    def __init__(self, config: ConfigT) -> None:
        self.config = config
        self._name = self.__class__.__name__

    @property
    def name(self) -> str:
        return self._name

    def validate_config(self) -> None:
        """Optional hook — raise ValueError if config is semantically invalid."""

    def setup(self) -> None:
        """Called once before the stage is first executed (open files, etc.)."""

    def teardown(self) -> None:
        """Called once after the stage completes, even on error."""


# --------------------------------------------------------------------------- #
#  Extractor                                                                    #
# --------------------------------------------------------------------------- #


class Extractor(PipelineStage[ConfigT]):
    """Reads raw frames from a source and emits FrameBatch chunks."""

    @abc.abstractmethod
    def extract(self, cancel: threading.Event | None = None) -> Iterator[FrameBatch]:
        """Yield successive FrameBatch chunks in file order."""

    def _timed_extract(
        self, cancel: threading.Event | None = None
    ) -> Iterator[tuple[FrameBatch, StageResult]]:
        t0 = time.perf_counter()
        for batch in self.extract(cancel):
            elapsed = time.perf_counter() - t0
            yield (
                batch,
                StageResult(
                    stage_name=self.name,
                    status=StageStatus.SUCCESS,
                    elapsed_s=elapsed,
                    records_out=len(batch),
                ),
            )
            t0 = time.perf_counter()


# --------------------------------------------------------------------------- #
#  Transformer                                                                  #
# --------------------------------------------------------------------------- #


class Transformer(PipelineStage[ConfigT]):
    """Transforms a FrameBatch and returns the (possibly new) batch."""

    @abc.abstractmethod
    def transform(self, batch: FrameBatch) -> FrameBatch:
        """Apply this transformation and return the resulting batch."""

    def _timed_transform(self, batch: FrameBatch) -> tuple[FrameBatch, StageResult]:
        t0 = time.perf_counter()
        records_in = len(batch)
        try:
            result = self.transform(batch)
            elapsed = time.perf_counter() - t0
            return result, StageResult(
                stage_name=self.name,
                status=StageStatus.SUCCESS,
                elapsed_s=elapsed,
                records_in=records_in,
                records_out=len(result),
            )
        except Exception as exc:
            elapsed = time.perf_counter() - t0
            return batch, StageResult(
                stage_name=self.name,
                status=StageStatus.FAILED,
                elapsed_s=elapsed,
                records_in=records_in,
                error=exc,
            )


# --------------------------------------------------------------------------- #
#  Loader                                                                       #
# --------------------------------------------------------------------------- #


class Loader(PipelineStage[ConfigT]):
    """Writes a decoded FrameBatch to a sink (text dump, Parquet, HDF5, ...)."""

    @abc.abstractmethod
    def load(self, batch: FrameBatch) -> None:
        """Write the batch to the configured sink."""

    def _timed_load(self, batch: FrameBatch) -> StageResult:
        t0 = time.perf_counter()
        records_in = len(batch)
        try:
            self.load(batch)
            elapsed = time.perf_counter() - t0
            return StageResult(
                stage_name=self.name,
                status=StageStatus.SUCCESS,
                elapsed_s=elapsed,
                records_in=records_in,
                records_out=records_in,
            )
        except Exception as exc:
            elapsed = time.perf_counter() - t0
            return StageResult(
                stage_name=self.name,
                status=StageStatus.FAILED,
                elapsed_s=elapsed,
                records_in=records_in,
                error=exc,
            )
