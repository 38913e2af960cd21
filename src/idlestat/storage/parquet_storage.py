"""
Parquet and JSON table backends using Polars.
"""

import logging
from pathlib import Path
from typing import List, Literal, Optional
import polars as pl

from .base import DataStorage

logger = logging.getLogger(__name__)

ParquetCompression = Literal["snappy", "gzip", "brotli", "lz4", "zstd"]


class ParquetStorage(DataStorage):
    """Compressed columnar tables, the default export format."""

    extension = "parquet"

    def __init__(self, compression: ParquetCompression = "snappy"):
        self.compression = compression
        logger.debug(f"Parquet tables use {compression} compression")

    def _write_frame(self, df: pl.DataFrame, path: Path) -> None:
        df.write_parquet(path, compression=self.compression)

    def _read_frame(self, path: Path, columns: Optional[List[str]]) -> pl.DataFrame:
        return pl.read_parquet(path, columns=columns)


class JsonStorage(DataStorage):
    """Tables as JSON arrays of row objects, for reading by eye or by scripts."""

    extension = "json"

    def _write_frame(self, df: pl.DataFrame, path: Path) -> None:
        df.write_json(path)

    def _read_frame(self, path: Path, columns: Optional[List[str]]) -> pl.DataFrame:
        df = pl.read_json(path)
        return df.select(columns) if columns else df
