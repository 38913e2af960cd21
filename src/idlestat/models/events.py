"""
Trace event model.

Every trace adapter turns its input into a time-ordered stream of
``TraceEvent`` values, which is the only thing the analysis engine consumes.
"""

from dataclasses import dataclass
from enum import Enum


class EventKind(Enum):
    """Kinds of hardware-state events understood by the engine."""
    IDLE_ENTER = "idle_enter"
    IDLE_EXIT = "idle_exit"
    FREQ_CHANGE = "freq_change"
    WAKEUP = "wakeup"


@dataclass(frozen=True)
class TraceEvent:
    """
    A single decoded trace record.
    """

    # Seconds since an arbitrary epoch; monotonic within a stream.
    timestamp: float
    # CPU the event applies to.
    cpu: int
    kind: EventKind
    # Idle depth for IDLE_ENTER.
    depth: int = -1
    # Frequency in Hz for FREQ_CHANGE.
    frequency: int = 0
    # Interrupt number for WAKEUP, -1 for an IPI.
    irq_id: int = -1
    # Interrupt handler or IPI reason for WAKEUP.
    irq_name: str = ""

    @classmethod
    def idle_enter(cls, timestamp: float, cpu: int, depth: int) -> "TraceEvent":
        return cls(timestamp, cpu, EventKind.IDLE_ENTER, depth=depth)

    @classmethod
    def idle_exit(cls, timestamp: float, cpu: int) -> "TraceEvent":
        return cls(timestamp, cpu, EventKind.IDLE_EXIT)

    @classmethod
    def freq_change(cls, timestamp: float, cpu: int, frequency: int) -> "TraceEvent":
        return cls(timestamp, cpu, EventKind.FREQ_CHANGE, frequency=frequency)

    @classmethod
    def wakeup(cls, timestamp: float, cpu: int, irq_id: int, irq_name: str) -> "TraceEvent":
        return cls(timestamp, cpu, EventKind.WAKEUP, irq_id=irq_id, irq_name=irq_name)
