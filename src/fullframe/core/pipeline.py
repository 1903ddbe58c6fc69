"""Pipeline orchestrator — wires Extractor → Transformer(s) → Loader(s)."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field

import structlog

from fullframe.core.base import (
    Extractor,
    Loader,
    PipelineStage,
    StageResult,
    StageStatus,
    Transformer,
)
from fullframe.errors import FullFrameError
from fullframe.models.batch import FrameBatch
from fullframe.observability.hooks import HookManager
from fullframe.observability.metrics import PipelineMetrics

log = structlog.get_logger(__name__)


@dataclass
class PipelineConfig:
    """Configuration for a pipeline run."""

    name: str
    collect_batches: bool = True


@dataclass
class PipelineResult:
    """Aggregated result of a complete pipeline execution."""

    pipeline_name: str
    status: StageStatus
    elapsed_s: float
    batches_processed: int
    total_frames: int
    stage_results: list[StageResult] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)
    batches: list[FrameBatch] = field(default_factory=list)
    metrics: dict[str, object] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == StageStatus.SUCCESS

    def raise_for_errors(self) -> None:
        """Re-raise the first error captured during the run, if any."""
        if self.errors:
            raise self.errors[0]


class Pipeline:
    """Orchestrates a decode pipeline: one Extractor, N Transformers, N Loaders.

    Usage::

        pipeline = Pipeline(
            config=PipelineConfig(name="ff-decode"),
            extractor=FullFrameExtractor(ext_cfg),
            transformers=[FrameDecoder(dec_cfg)],
            loaders=[HexDumpLoader(dump_cfg)],
        )
        result = pipeline.run()

    Each batch emitted by the extractor flows through all transformers and
    then every loader before the next batch is read.  Stages are set up in
    order (extractor first) so a bad frame selection fails before any
    loader opens its output.
    """

    def __init__(
        self,
        config: PipelineConfig,
        extractor: Extractor,  # type: ignore[type-arg]
        transformers: list[Transformer] | None = None,  # type: ignore[type-arg]
        loaders: list[Loader] | None = None,  # type: ignore[type-arg]
        hooks: HookManager | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        self.config = config
        self.extractor = extractor
        self.transformers: list[Transformer] = transformers or []  # type: ignore[type-arg]
        self.loaders: list[Loader] = loaders or []  # type: ignore[type-arg]
        self.hooks = hooks or HookManager()
        self.cancel = cancel
        self._metrics = PipelineMetrics(pipeline_name=config.name)

    @property
    def metrics(self) -> PipelineMetrics:
        return self._metrics

    # ------------------------------------------------------------------ #
    #  Public interface                                                     #
    # ------------------------------------------------------------------ #

    def run(self) -> PipelineResult:
        """Execute the pipeline synchronously and return a result summary."""
        t0 = time.perf_counter()
        all_stage_results: list[StageResult] = []
        errors: list[Exception] = []
        collected: list[FrameBatch] = []
        batches = 0
        total_frames = 0
        started: list[PipelineStage] = []  # type: ignore[type-arg]

        log.info("pipeline.start", pipeline=self.config.name)
        self.hooks.fire("pipeline.start", self.config.name)

        try:
            for stage in self._stages():
                stage.validate_config()
            for stage in self._stages():
                stage.setup()
                started.append(stage)

            for batch, ext_result in self.extractor._timed_extract(self.cancel):
                all_stage_results.append(ext_result)
                self._record(ext_result)
                batch_log = log.bind(batch=batches, frames=len(batch))
                batch_log.debug("pipeline.batch.extracted")
                self.hooks.fire("batch.extracted", batch)

                batch, t_results, t_errors = self._run_transformers(batch)
                all_stage_results.extend(t_results)
                errors.extend(t_errors)

                if t_errors:
                    break
                self.hooks.fire("batch.decoded", batch)

                l_results, l_errors = self._run_loaders(batch)
                all_stage_results.extend(l_results)
                errors.extend(l_errors)
                if l_errors:
                    break

                batches += 1
                total_frames += len(batch)
                self._metrics.record_batch(len(batch))
                if self.config.collect_batches:
                    batch.release_raw()
                    collected.append(batch)

        except (FullFrameError, OSError) as exc:
            errors.append(exc)
            self.hooks.fire("stage.error", exc)
            log.warning("pipeline.aborted", error=str(exc), error_type=type(exc).__name__)

        except Exception as exc:
            errors.append(exc)
            self.hooks.fire("stage.error", exc)
            log.exception("pipeline.unhandled_error", error=str(exc))

        finally:
            for stage in reversed(started):
                try:
                    stage.teardown()
                except Exception as exc:
                    errors.append(exc)
                    log.exception("pipeline.teardown_error", stage=stage.name, error=str(exc))

        elapsed = time.perf_counter() - t0
        status = StageStatus.SUCCESS if not errors else StageStatus.FAILED

        result = PipelineResult(
            pipeline_name=self.config.name,
            status=status,
            elapsed_s=elapsed,
            batches_processed=batches,
            total_frames=total_frames,
            stage_results=all_stage_results,
            errors=errors,
            batches=collected,
            metrics=self._metrics.snapshot(elapsed),
        )

        log.info(
            "pipeline.complete",
            pipeline=self.config.name,
            status=status,
            elapsed_s=f"{elapsed:.3f}",
            batches=batches,
            frames=total_frames,
        )
        self.hooks.fire("pipeline.complete", result)
        return result

    # ------------------------------------------------------------------ #
    #  Internal helpers                                                     #
    # ------------------------------------------------------------------ #

    def _stages(self) -> list[PipelineStage]:  # type: ignore[type-arg]
        return [self.extractor, *self.transformers, *self.loaders]

    def _record(self, result: StageResult) -> None:
        self._metrics.record_stage(result)

    def _run_transformers(
        self,
        batch: FrameBatch,
    ) -> tuple[FrameBatch, list[StageResult], list[Exception]]:
        results: list[StageResult] = []
        errors: list[Exception] = []
        for transformer in self.transformers:
            batch, result = transformer._timed_transform(batch)
            results.append(result)
            self._record(result)
            if result.error:
                errors.append(result.error)
                self.hooks.fire("stage.error", result.error)
                log.warning(
                    "transformer.error",
                    transformer=transformer.name,
                    error=str(result.error),
                )
                break
        return batch, results, errors

    def _run_loaders(self, batch: FrameBatch) -> tuple[list[StageResult], list[Exception]]:
        results: list[StageResult] = []
        errors: list[Exception] = []
        for loader in self.loaders:
            result = loader._timed_load(batch)
            results.append(result)
            self._record(result)
            if result.error:
                errors.append(result.error)
                self.hooks.fire("stage.error", result.error)
                log.warning("loader.error", loader=loader.name, error=str(result.error))
                break
            else:
                self.hooks.fire("batch.loaded", batch, loader.name)
        return results, errors

    def add_transformer(self, transformer: Transformer) -> Pipeline:  # type: ignore[type-arg]
        """Fluent method to append a transformer stage."""
        self.transformers.append(transformer)
        return self

    def add_loader(self, loader: Loader) -> Pipeline:  # type: ignore[type-arg]
        """Fluent method to append a loader stage."""
        self.loaders.append(loader)
        return self

    def __repr__(self) -> str:
        t_names = [t.name for t in self.transformers]
        l_names = [loader.name for loader in self.loaders]
        return (
            f"Pipeline(name={self.config.name!r}, "
            f"extractor={self.extractor.name!r}, "
            f"transformers={t_names}, "
            f"loaders={l_names})"
        )
