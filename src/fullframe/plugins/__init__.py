"""Built-in plugins: extractor, decoder, and loaders."""

from fullframe.plugins.extractors.frames import FullFrameExtractor, FullFrameExtractorConfig
from fullframe.plugins.loaders.hdf5 import HDF5Loader, HDF5LoaderConfig
from fullframe.plugins.loaders.hexdump import HexDumpLoader, HexDumpLoaderConfig
from fullframe.plugins.loaders.parquet import ParquetLoader, ParquetLoaderConfig
from fullframe.plugins.transformers.decoder import BadTimePolicy, FrameDecoder, FrameDecoderConfig

__all__ = [
    "FullFrameExtractor",
    "FullFrameExtractorConfig",
    "FrameDecoder",
    "FrameDecoderConfig",
    "BadTimePolicy",
    "HexDumpLoader",
    "HexDumpLoaderConfig",
    "ParquetLoader",
    "ParquetLoaderConfig",
    "HDF5Loader",
    "HDF5LoaderConfig",
]
