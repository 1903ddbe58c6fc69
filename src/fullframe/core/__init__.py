"""Core pipeline abstractions and engine."""

from fullframe.core.base import (
    Extractor,
    Loader,
    PipelineStage,
    StageResult,
    StageStatus,
    Transformer,
)
from fullframe.core.pipeline import Pipeline, PipelineConfig, PipelineResult
from fullframe.core.registry import StageRegistry, registry

__all__ = [
    "Extractor",
    "Transformer",
    "Loader",
    "PipelineStage",
    "StageResult",
    "StageStatus",
    "Pipeline",
    "PipelineConfig",
    "PipelineResult",
    "StageRegistry",
    "registry",
]
