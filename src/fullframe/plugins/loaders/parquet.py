"""Parquet loader — archives decoded frames as one row per frame.

Columns: ``frame_num``, ``time_s``, ``time_valid``, ``qual_hi``, ``qual_lo``
and one ``word_NNNN`` column per requested word.  Batches of one run are
streamed into a single file through a ``pyarrow.parquet.ParquetWriter``.
Words wider than 64 bits are stored as decimal strings.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq
from pydantic import BaseModel, Field

from fullframe.core.base import Loader
from fullframe.core.registry import registry
from fullframe.models.batch import FrameBatch


class ParquetLoaderConfig(BaseModel):
    path: Path = Field(description="Output Parquet file")
    compression: str = "snappy"
    overwrite: bool = Field(
        default=True,
        description="If False and the file exists, its rows are kept ahead of the new ones",
    )


@registry.loader("parquet")
class ParquetLoader(Loader[ParquetLoaderConfig]):
    """Stream decoded FrameBatches into a Parquet file."""

    config_class = ParquetLoaderConfig

    def __init__(self, config: ParquetLoaderConfig) -> None:
        super().__init__(config)
        self._writer: pq.ParquetWriter | None = None
        self._existing: pa.Table | None = None

    def setup(self) -> None:
        self.config.path.parent.mkdir(parents=True, exist_ok=True)
        self._writer = None
        self._existing = None
        if not self.config.overwrite and self.config.path.exists():
            self._existing = pq.read_table(self.config.path)

    def load(self, batch: FrameBatch) -> None:
        table = pa.Table.from_pandas(_archival_frame(batch.to_dataframe()), preserve_index=False)
        if self._writer is None:
            schema = self._existing.schema if self._existing is not None else table.schema
            self._writer = pq.ParquetWriter(
                self.config.path, schema, compression=self.config.compression
            )
            if self._existing is not None:
                self._writer.write_table(self._existing)
                self._existing = None
        self._writer.write_table(table.cast(self._writer.schema))

    def teardown(self) -> None:
        if self._writer is not None:
            self._writer.close()
            self._writer = None


def _archival_frame(df: pd.DataFrame) -> pd.DataFrame:
    for col in df.columns:
        if df[col].dtype == object:
            df[col] = df[col].map(str)
    return df
