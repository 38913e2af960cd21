"""
Data models and structures for the analyzer.

Event Models:
- Decoded trace records consumed by the engine

State Models:
- C-state and P-state tracks with running statistics
- Wake-up source tables

Configuration Models:
- Analysis, report, trace and storage settings
"""

from .config import (
    DEFAULT_COMPOSITE_FREQUENCY,
    DISPLAY_CHOICES,
    AnalysisConfig,
    AppConfig,
    CompositeFrequency,
    ReportConfig,
    StorageConfig,
    TraceConfig,
)
from .events import EventKind, TraceEvent
from .states import (
    MAX_CSTATE,
    CState,
    CStateTrack,
    IntervalStats,
    PState,
    PStateTrack,
    Residency,
    WakeupIrq,
    WakeupTable,
)

__all__ = [
    # Configuration
    "DEFAULT_COMPOSITE_FREQUENCY",
    "DISPLAY_CHOICES",
    "AnalysisConfig",
    "AppConfig",
    "CompositeFrequency",
    "ReportConfig",
    "StorageConfig",
    "TraceConfig",
    # Events
    "EventKind",
    "TraceEvent",
    # States
    "MAX_CSTATE",
    "CState",
    "CStateTrack",
    "IntervalStats",
    "PState",
    "PStateTrack",
    "Residency",
    "WakeupIrq",
    "WakeupTable",
]
