"""
Configuration validation.

Each section of config.toml is checked and turned into its dataclass.
Missing keys take their defaults.
"""

import logging
from typing import Any, Dict

from ..models.config import (
    DISPLAY_CHOICES,
    AnalysisConfig,
    AppConfig,
    CompositeFrequency,
    ReportConfig,
    StorageConfig,
    TraceConfig,
)
from ..validation import (
    ValidationError,
    validate_display_flags,
    validate_enum_choice,
    validate_positive_integer,
)

logger = logging.getLogger(__name__)


def validate_analysis_config(analysis_data: Dict[str, Any]) -> AnalysisConfig:
    """
    Raises:
        ValidationError: If validation fails
    """
    composite = validate_enum_choice(
        analysis_data.get("composite_frequency", AnalysisConfig().composite_frequency.value),
        choices=[choice.value for choice in CompositeFrequency],
        field_name="analysis.composite_frequency",
        case_sensitive=False,
    )
    verbose = validate_positive_integer(
        analysis_data.get("verbose", 0),
        min_value=0,
        max_value=10,
        field_name="analysis.verbose",
    )
    return AnalysisConfig(composite_frequency=CompositeFrequency(composite), verbose=verbose)


def validate_report_config(report_data: Dict[str, Any], report_names=None) -> ReportConfig:
    """
    Args:
        report_data: Raw [report] table
        report_names: Registered report names; the name is not checked if None

    Raises:
        ValidationError: If validation fails
    """
    report_format = report_data.get("format", "default")
    if not isinstance(report_format, str) or not report_format.strip():
        raise ValidationError("report.format must be a non-empty string",
                              field_name="report.format", value=report_format)
    if report_names is not None:
        report_format = validate_enum_choice(report_format, choices=list(report_names),
                                             field_name="report.format")

    display = validate_display_flags(
        report_data.get("display", ["idle"]),
        DISPLAY_CHOICES,
        field_name="report.display",
    )
    return ReportConfig(format=report_format, display=display)


def validate_trace_config(trace_data: Dict[str, Any]) -> TraceConfig:
    """
    Raises:
        ValidationError: If validation fails
    """
    sysfs_root = trace_data.get("sysfs_root", TraceConfig().sysfs_root)
    if not isinstance(sysfs_root, str) or not sysfs_root.strip():
        raise ValidationError("trace.sysfs_root must be a non-empty string",
                              field_name="trace.sysfs_root", value=sysfs_root)
    return TraceConfig(sysfs_root=sysfs_root)


def validate_storage_config(storage_data: Dict[str, Any]) -> StorageConfig:
    """
    Raises:
        ValidationError: If validation fails
    """
    try:
        return StorageConfig.from_dict(storage_data)
    except ValueError as e:
        raise ValidationError(str(e), field_name="storage", value=storage_data) from e


def validate_app_config(config_data: Dict[str, Any]) -> AppConfig:
    """
    Validate a whole parsed config.toml.

    Raises:
        ValidationError: If any section is invalid
    """
    config = AppConfig(
        analysis=validate_analysis_config(config_data.get("analysis", {})),
        report=validate_report_config(config_data.get("report", {})),
        trace=validate_trace_config(config_data.get("trace", {})),
        storage=validate_storage_config(config_data.get("storage", {})),
    )
    logger.debug(f"Validated configuration: {config}")
    return config
