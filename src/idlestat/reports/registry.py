"""
Registry of report renderers, keyed by name.
"""

import logging
from typing import Dict, List, Optional, TextIO, Type

from ..validation import ValidationError
from .base import Report

logger = logging.getLogger(__name__)

_REPORTS: Dict[str, Type[Report]] = {}


def register_report(report_cls: Type[Report]) -> None:
    """
    Raises:
        ValueError: If the class has no name or the name is taken
    """
    if not report_cls.name:
        raise ValueError("Report must have a name")
    if report_cls.name in _REPORTS:
        raise ValueError(f"Report already registered: {report_cls.name}")
    _REPORTS[report_cls.name] = report_cls


def list_reports() -> List[str]:
    return list(_REPORTS)


def get_report(name: str, stream: Optional[TextIO] = None) -> Report:
    """
    Create a renderer by name.

    Raises:
        ValidationError: If no report has this name
    """
    report_cls = _REPORTS.get(name)
    if report_cls is None:
        raise ValidationError(
            f"Report style {name} does not exist, available: {list_reports()}",
            field_name="report", value=name)
    logger.debug(f"Creating {name} report")
    return report_cls(stream)
