"""Observability — structured logging, metrics, and event hooks."""

from fullframe.observability.hooks import EventHook, HookManager
from fullframe.observability.logging import configure_logging, get_logger
from fullframe.observability.metrics import PipelineMetrics, StageTiming

__all__ = [
    "configure_logging",
    "get_logger",
    "PipelineMetrics",
    "StageTiming",
    "EventHook",
    "HookManager",
]
