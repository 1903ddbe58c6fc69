"""Event hooks — react to decode pipeline events without touching the pipeline.

Example::

    hooks = HookManager()

    @hooks.on("batch.decoded")
    def progress(batch):
        bar.update(len(batch))

    decode(path, 900, 16, hooks=hooks)
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

EventHandler = Callable[..., None]

log = structlog.get_logger(__name__)


class EventHook:
    """A named event with an ordered list of handlers."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._handlers: list[EventHandler] = []

    def register(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    def fire(self, *args: object, **kwargs: object) -> None:
        """Invoke every handler; a failing handler is logged and the decode goes on."""
        for handler in list(self._handlers):
            try:
                handler(*args, **kwargs)
            except Exception as exc:
                log.warning(
                    "hook.handler_failed",
                    hook=self.name,
                    handler=getattr(handler, "__name__", repr(handler)),
                    error=str(exc),
                )


class HookManager:
    """Registry of named EventHooks.

    Pipeline events
    ---------------
    ``pipeline.start``     — (pipeline_name) before any stage is set up
    ``batch.extracted``    — (batch) after each chunk of frames is read
    ``batch.decoded``      — (batch) after all transformers ran on a chunk
    ``batch.loaded``       — (batch, loader_name) after each loader wrote a chunk
    ``stage.error``        — (exception) whenever a stage fails
    ``pipeline.complete``  — (PipelineResult) after teardown
    """

    BUILTIN_EVENTS = (
        "pipeline.start",
        "batch.extracted",
        "batch.decoded",
        "batch.loaded",
        "stage.error",
        "pipeline.complete",
    )

    def __init__(self) -> None:
        self._hooks: dict[str, EventHook] = {name: EventHook(name) for name in self.BUILTIN_EVENTS}

    def on(self, event: str) -> Callable[[EventHandler], EventHandler]:
        """Decorator to register a handler for a named event."""

        def _decorator(handler: EventHandler) -> EventHandler:
            self.register(event, handler)
            return handler

        return _decorator

    def register(self, event: str, handler: EventHandler) -> None:
        self._hooks.setdefault(event, EventHook(event)).register(handler)

    def fire(self, event: str, *args: object, **kwargs: object) -> None:
        hook = self._hooks.get(event)
        if hook is not None:
            hook.fire(*args, **kwargs)
