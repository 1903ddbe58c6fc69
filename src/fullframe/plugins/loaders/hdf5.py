"""HDF5 loader — archives decoded frames to an HDF5 file.

Data layout
-----------
::

    /fullframe/
        frame_num    (int64,   n)
        time_s       (float64, n)
        time_valid   (uint8,   n)
        quality      (uint8,   n x 2)
        values       (uint64,  n x m)   -- variable-length strings for words > 64 bits
        attrs:       word_indices, word_size_bits, frame_word_count

Every dataset is resizable along axis 0, so successive batches (and
successive runs opened with ``mode="a"``) append rows.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

import h5py
import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, Field

from fullframe.core.base import Loader
from fullframe.core.registry import registry
from fullframe.models.batch import FrameBatch

_ROOT_GROUP = "fullframe"


class HDF5LoaderConfig(BaseModel):
    path: Path = Field(description="Output HDF5 file path (.h5 or .hdf5)")
    mode: Literal["w", "a"] = Field(
        default="w",
        description="'w' overwrites the file, 'a' appends rows to existing datasets",
    )
    compression: str | None = "gzip"
    compression_opts: Annotated[int, Field(ge=0, le=9)] = 4
    flush_on_batch: bool = True


@registry.loader("hdf5")
class HDF5Loader(Loader[HDF5LoaderConfig]):
    """Write decoded FrameBatches to resizable HDF5 datasets."""

    config_class = HDF5LoaderConfig

    def __init__(self, config: HDF5LoaderConfig) -> None:
        super().__init__(config)
        self._file: h5py.File | None = None

    def setup(self) -> None:
        self.config.path.parent.mkdir(parents=True, exist_ok=True)
        self._file = h5py.File(self.config.path, self.config.mode)

    def load(self, batch: FrameBatch) -> None:
        assert self._file is not None, "setup() must be called before load()"
        assert batch.times is not None and batch.time_valid is not None
        assert batch.quality is not None and batch.values is not None

        root = self._file.require_group(_ROOT_GROUP)
        root.attrs["word_indices"] = np.asarray(batch.word_indices, dtype=np.int64)
        root.attrs["word_size_bits"] = batch.geometry.word_size_bits
        root.attrs["frame_word_count"] = batch.geometry.frame_word_count

        self._append_or_create(root, "frame_num", batch.frame_numbers.astype(np.int64))
        self._append_or_create(root, "time_s", batch.times)
        self._append_or_create(root, "time_valid", batch.time_valid.astype(np.uint8))
        self._append_or_create(root, "quality", batch.quality)

        values = batch.values
        if values.shape[1]:
            if values.dtype == object:
                values = np.vectorize(str, otypes=[object])(values).astype(h5py.string_dtype())
            self._append_or_create(root, "values", values)

        if self.config.flush_on_batch:
            self._file.flush()

    def teardown(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def _append_or_create(
        self,
        grp: h5py.Group,
        name: str,
        data: NDArray[np.generic],
    ) -> None:
        if name not in grp:
            grp.create_dataset(
                name,
                data=data,
                maxshape=(None,) + data.shape[1:],
                chunks=True,
                compression=self.config.compression,
                compression_opts=self.config.compression_opts if self.config.compression else None,
            )
        else:
            ds = grp[name]
            old_size = ds.shape[0]
            ds.resize(old_size + len(data), axis=0)
            ds[old_size:] = data
