"""
Trace file decoding.

Formats are registered here, in detection order.
"""

from .base import LoadedTrace, TraceFormat
from .ftrace import FtraceFormat
from .idlestat_native import IdlestatNativeFormat
from .parsing import RecordParser
from .registry import (
    detect_trace_format,
    get_trace_format,
    list_trace_formats,
    load_trace,
    register_trace_format,
    unregister_trace_format,
)
from .tracecmd import TraceCmdReportFormat

register_trace_format(IdlestatNativeFormat())
register_trace_format(FtraceFormat())
register_trace_format(TraceCmdReportFormat())

__all__ = [
    "FtraceFormat",
    "IdlestatNativeFormat",
    "LoadedTrace",
    "RecordParser",
    "TraceCmdReportFormat",
    "TraceFormat",
    "detect_trace_format",
    "get_trace_format",
    "list_trace_formats",
    "load_trace",
    "register_trace_format",
    "unregister_trace_format",
]
