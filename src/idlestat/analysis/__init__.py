"""
Event-driven state tracking and hierarchical aggregation.
"""

from .baseline import merge_pstate_tracks, merge_pstates
from .composition import composite_depth, composite_frequency, update_group, update_hierarchy
from .cstates import classify_residency, record_cstate_event
from .engine import Analyzer, analyze
from .pstates import alloc_pstate, cpu_change_pstate, enter_idle, exit_idle, record_group_freq
from .wakeups import store_irq

__all__ = [
    "Analyzer",
    "alloc_pstate",
    "analyze",
    "classify_residency",
    "composite_depth",
    "composite_frequency",
    "cpu_change_pstate",
    "enter_idle",
    "exit_idle",
    "merge_pstate_tracks",
    "merge_pstates",
    "record_cstate_event",
    "record_group_freq",
    "store_irq",
    "update_group",
    "update_hierarchy",
]
