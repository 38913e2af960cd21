"""
Configuration data models.

This module contains the configuration structures for the analysis engine,
trace loading, reporting and statistics export.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Literal

SUPPORTED_STORAGE_FORMATS = ("parquet", "json")
SUPPORTED_COMPRESSION = ("snappy", "gzip", "brotli", "lz4", "zstd")


class CompositeFrequency(Enum):
    """
    Which member frequency becomes the frequency of a core or cluster.

    MIN keeps the long-standing behaviour of reporting the lowest frequency
    among running members; MAX reports the highest one.
    """
    MIN = "min"
    MAX = "max"


DEFAULT_COMPOSITE_FREQUENCY = CompositeFrequency.MIN

# Report sections that can be selected for display.
DISPLAY_CHOICES = ["idle", "frequency", "wakeup"]

DEFAULT_SYSFS_ROOT = "/sys/devices/system/cpu"


@dataclass
class AnalysisConfig:
    """
    Settings consumed by the analysis engine.
    """

    # Extremum used for core and cluster frequencies.
    composite_frequency: CompositeFrequency = DEFAULT_COMPOSITE_FREQUENCY
    # Verbosity level; >0 logs discarded intervals and per-event detail.
    verbose: int = 0


@dataclass
class ReportConfig:
    """
    Settings for report rendering.
    """

    # Registered report name ("default", "csv", "comparison").
    format: str = "default"
    # Sections to print, in order.
    display: List[str] = field(default_factory=lambda: ["idle"])


@dataclass
class TraceConfig:
    """
    Settings for trace loading.
    """

    # Where host topology and idle states are read from for ftrace inputs.
    sysfs_root: str = DEFAULT_SYSFS_ROOT


@dataclass
class StorageConfig:
    """
    Configuration model for exported statistics.

    Attributes:
        format: Storage format for the statistics tables
            - 'parquet': Columnar format with compression
            - 'json': Human-readable records
        compression: Compression algorithm for Parquet format

    Note:
        Compression setting only applies to Parquet format.
    """

    format: Literal["parquet", "json"] = "parquet"
    compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "StorageConfig":
        """
        Create a StorageConfig instance from a dictionary.

        Raises:
            ValueError: If invalid configuration values are provided
        """
        format_type = config_dict.get("format", "parquet")
        compression = config_dict.get("compression", "snappy")

        if format_type not in SUPPORTED_STORAGE_FORMATS:
            raise ValueError(f"Unsupported storage format: {format_type}")

        if format_type == "parquet" and compression not in SUPPORTED_COMPRESSION:
            raise ValueError(f"Unsupported compression algorithm: {compression}")

        return cls(format=format_type, compression=compression)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format,
            "compression": self.compression,
        }


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    trace: TraceConfig = field(default_factory=TraceConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
