"""
Registry of trace file formats.

Formats are registered explicitly by name; detection tries them in
registration order against the first line of the file.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..models.config import TraceConfig
from ..validation import TraceFormatError
from .base import LoadedTrace, TraceFormat

logger = logging.getLogger(__name__)

_TRACE_FORMATS: Dict[str, TraceFormat] = {}


def register_trace_format(trace_format: TraceFormat) -> None:
    """
    Add a format to the registry.

    Raises:
        ValueError: If the format has no name or the name is taken
    """
    if not trace_format.name:
        raise ValueError("Trace format must have a name")
    if trace_format.name in _TRACE_FORMATS:
        raise ValueError(f"Trace format already registered: {trace_format.name}")
    _TRACE_FORMATS[trace_format.name] = trace_format
    logger.debug(f"Registered trace format: {trace_format.name}")


def unregister_trace_format(name: str) -> None:
    _TRACE_FORMATS.pop(name, None)


def get_trace_format(name: str) -> TraceFormat:
    """
    Raises:
        TraceFormatError: If no format has this name
    """
    try:
        return _TRACE_FORMATS[name]
    except KeyError:
        raise TraceFormatError(
            f"Unknown trace format '{name}', available: {list_trace_formats()}") from None


def list_trace_formats() -> List[str]:
    return list(_TRACE_FORMATS)


def detect_trace_format(path: Union[str, Path]) -> TraceFormat:
    """
    Find the format whose magic matches the first line of ``path``.

    Raises:
        TraceFormatError: If the file cannot be read or no format matches
    """
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            first_line = f.readline()
    except OSError as e:
        raise TraceFormatError(f"Failed to open '{path}': {e}") from e

    for trace_format in _TRACE_FORMATS.values():
        if trace_format.check_magic(first_line):
            logger.debug(f"Detected {trace_format.name} format for {path}")
            return trace_format
    raise TraceFormatError(f"Unrecognized trace format in '{path}'")


def load_trace(path: Union[str, Path],
               config: Optional[TraceConfig] = None,
               format_name: Optional[str] = None) -> LoadedTrace:
    """
    Open a trace file with a named or detected format.

    Raises:
        TraceFormatError: If the format is unknown or the header is invalid
    """
    if format_name:
        trace_format = get_trace_format(format_name)
    else:
        trace_format = detect_trace_format(path)
    logger.info(f"Loading {trace_format.name} trace {path}")
    return trace_format.load(path, config)
