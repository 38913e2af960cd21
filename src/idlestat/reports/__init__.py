"""
Report rendering for analysed topologies.
"""

from .base import Report
from .comparison import ComparisonReport
from .csv_report import CsvReport
from .default import DefaultReport
from .registry import get_report, list_reports, register_report
from .traversal import dump_cstates, dump_pstates, dump_wakeups, render

register_report(DefaultReport)
register_report(CsvReport)
register_report(ComparisonReport)

__all__ = [
    "ComparisonReport",
    "CsvReport",
    "DefaultReport",
    "Report",
    "dump_cstates",
    "dump_pstates",
    "dump_wakeups",
    "get_report",
    "list_reports",
    "register_report",
    "render",
]
