"""
Storage of analysis statistics.

Statistics are flattened into Polars DataFrames and written as Parquet
(with a configurable compression algorithm) or JSON, alongside a JSON
summary of the run.
"""

from .base import DataStorage
from .exporter import StatsExporter, cstates_frame, pstates_frame, wakeups_frame
from .factory import create_storage
from .parquet_storage import JsonStorage, ParquetStorage

__all__ = [
    "DataStorage",
    "JsonStorage",
    "ParquetStorage",
    "StatsExporter",
    "create_storage",
    "cstates_frame",
    "pstates_frame",
    "wakeups_frame",
]
