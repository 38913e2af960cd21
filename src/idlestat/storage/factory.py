"""
Factory for creating storage instances.
"""

import logging

from ..models.config import SUPPORTED_STORAGE_FORMATS
from .base import DataStorage
from .parquet_storage import JsonStorage, ParquetCompression, ParquetStorage

logger = logging.getLogger(__name__)


def create_storage(format_type: str = "parquet",
                   compression: ParquetCompression = "snappy") -> DataStorage:
    """
    Return the backend for an export format.

    Args:
        format_type: One of SUPPORTED_STORAGE_FORMATS
        compression: Parquet compression codec, ignored for JSON

    Raises:
        ValueError: If the format is not supported
    """
    if format_type == "parquet":
        return ParquetStorage(compression=compression)
    if format_type == "json":
        logger.debug("Statistics tables will be written as JSON")
        return JsonStorage()
    raise ValueError(f"Unsupported storage format: {format_type}, "
                     f"expected one of {', '.join(SUPPORTED_STORAGE_FORMATS)}")
