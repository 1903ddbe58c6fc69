"""Decode metrics: per-stage busy time and frame throughput for one run.

The snapshot lands in ``TelemetryResult.metadata["metrics"]`` and feeds the
CLI summary table.  Export elsewhere through the ``HookManager`` in
``hooks.py`` (the ``pipeline.complete`` event carries the result).
"""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fullframe.core.base import StageResult


def _rate(frames: int, seconds: float) -> float:
    return frames / seconds if seconds > 0.0 else 0.0


@dataclass
class StageTiming:
    """Time one stage spent on frames, summed over every batch it saw."""

    name: str
    calls: int = 0
    frames: int = 0
    failures: int = 0
    busy_s: float = 0.0

    @property
    def frames_per_s(self) -> float:
        return _rate(self.frames, self.busy_s)


class PipelineMetrics:
    """Accumulates batch counts and stage timings for one run under a lock."""

    def __init__(self, pipeline_name: str) -> None:
        self.pipeline_name = pipeline_name
        self._lock = Lock()
        self._stages: dict[str, StageTiming] = {}
        self.batches = 0
        self.frames = 0

    def record_batch(self, frame_count: int) -> None:
        with self._lock:
            self.batches += 1
            self.frames += frame_count

    def record_stage(self, result: StageResult) -> None:
        # Extractors report frames out, transformers and loaders frames in.
        frames = max(result.records_in, result.records_out)
        with self._lock:
            timing = self._stages.setdefault(result.stage_name, StageTiming(result.stage_name))
            timing.calls += 1
            timing.frames += frames
            timing.busy_s += result.elapsed_s
            if result.error is not None:
                timing.failures += 1

    def stage(self, name: str) -> StageTiming | None:
        return self._stages.get(name)

    def snapshot(self, elapsed_s: float) -> dict[str, object]:
        """Plain-dict view of the run, with ``elapsed_s`` the wall time."""
        with self._lock:
            return {
                "pipeline": self.pipeline_name,
                "elapsed_s": round(elapsed_s, 4),
                "batches": self.batches,
                "frames": self.frames,
                "frames_per_s": round(_rate(self.frames, elapsed_s), 1),
                "stages": {
                    name: {
                        "calls": t.calls,
                        "frames": t.frames,
                        "failures": t.failures,
                        "busy_s": round(t.busy_s, 6),
                        "frames_per_s": round(t.frames_per_s, 1),
                    }
                    for name, t in self._stages.items()
                },
            }
