"""Stage registry — stages register under a kind and a name, and the CLI
builds them back from a name plus a plain config mapping."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Literal, TypeVar

if TYPE_CHECKING:
    from fullframe.core.base import PipelineStage

StageKind = Literal["extractor", "transformer", "loader"]
_KINDS: tuple[StageKind, ...] = ("extractor", "transformer", "loader")

StageT = TypeVar("StageT", bound=type)


class StageRegistry:
    """Name → class lookup for pipeline stages, grouped by kind.

    Plugins register themselves with::

        @registry.loader("hexdump")
        class HexDumpLoader(Loader[HexDumpLoaderConfig]):
            ...

    and the CLI instantiates them with::

        loader = registry.create("loader", "parquet", {"path": "out.parquet"})
    """

    def __init__(self) -> None:
        self._stages: dict[StageKind, dict[str, type]] = {kind: {} for kind in _KINDS}

    # ------------------------------------------------------------------ #
    #  Registration                                                       #
    # ------------------------------------------------------------------ #

    def register(self, kind: StageKind, name: str) -> Callable[[StageT], StageT]:
        if kind not in self._stages:
            raise ValueError(f"Unknown stage kind '{kind}'. Expected one of {list(_KINDS)}")

        def _decorator(cls: StageT) -> StageT:
            self._stages[kind][name] = cls
            cls._registry_name = name  # type: ignore[attr-defined]
            return cls

        return _decorator

    def extractor(self, name: str) -> Callable[[StageT], StageT]:
        return self.register("extractor", name)

    def transformer(self, name: str) -> Callable[[StageT], StageT]:
        return self.register("transformer", name)

    def loader(self, name: str) -> Callable[[StageT], StageT]:
        return self.register("loader", name)

    # ------------------------------------------------------------------ #
    #  Lookup                                                             #
    # ------------------------------------------------------------------ #

    def get(self, kind: StageKind, name: str) -> type:
        try:
            return self._stages[kind][name]
        except KeyError:
            available = self.names(kind)
            raise KeyError(f"Unknown {kind} '{name}'. Available: {available}") from None

    def create(
        self,
        kind: StageKind,
        name: str,
        config: Mapping[str, Any] | None = None,
    ) -> PipelineStage[Any]:
        """Instantiate a registered stage from a plain config mapping."""
        cls = self.get(kind, name)
        return cls(cls.config_class(**dict(config or {})))

    def names(self, kind: StageKind) -> list[str]:
        return sorted(self._stages[kind])

    def all_stages(self) -> dict[str, list[str]]:
        return {f"{kind}s": self.names(kind) for kind in _KINDS}


registry = StageRegistry()
