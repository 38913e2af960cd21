"""
idlestat: CPU idle state, frequency and wake-up analysis from kernel traces.

This package replays a recorded stream of idle, frequency and interrupt
events over a cluster/core/CPU topology and reports how long each CPU, core
and cluster spent in each idle state and at each frequency, and what woke
them up.

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Data structures and type definitions
- validation: Input validation and error handling
- topology: Cluster/core/CPU tree and host sysfs discovery
- analysis: Idle and frequency state machines, composition, baseline merge
- traces: Trace file formats
- reports: Report renderers
- storage: Statistics export
- cli: Command-line interface and orchestration

Usage:
    From command line:
        idlestat -f trace.txt -c -p -w

    Programmatically:
        from idlestat import Topology, TopologyEntry, analyze
        topology = Topology.from_entries([TopologyEntry(0, 0, 0)])
        analyze(topology, events)
"""

__version__ = "0.8.0"

# Main interfaces
from .config import get_config, clear_config_cache, set_config_path
from .cli.orchestrator import AnalysisRunner
from .cli import main_cli

# Analysis
from .analysis import Analyzer, analyze, merge_pstates

# Model classes for external use
from .models import (
    AppConfig,
    AnalysisConfig,
    CompositeFrequency,
    CState,
    EventKind,
    PState,
    TraceEvent,
    WakeupIrq,
)
from .topology import CStateInfo, Topology, TopologyEntry

# Trace and report entry points
from .traces import load_trace
from .reports import get_report, render

# Errors
from .validation import (
    AllocationFailure,
    IdlestatError,
    InconsistentBaseline,
    MalformedTopologyError,
    StructuralInputError,
    TraceFormatError,
    ValidationError,
)

__all__ = [
    # Main interfaces
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "AnalysisRunner",
    "main_cli",
    # Analysis
    "Analyzer",
    "analyze",
    "merge_pstates",
    # Models
    "AppConfig",
    "AnalysisConfig",
    "CompositeFrequency",
    "CState",
    "EventKind",
    "PState",
    "TraceEvent",
    "WakeupIrq",
    "CStateInfo",
    "Topology",
    "TopologyEntry",
    # Traces and reports
    "load_trace",
    "get_report",
    "render",
    # Errors
    "AllocationFailure",
    "IdlestatError",
    "InconsistentBaseline",
    "MalformedTopologyError",
    "StructuralInputError",
    "TraceFormatError",
    "ValidationError",
]
