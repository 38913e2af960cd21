"""
State-track structures for C-states, P-states and wake-up sources.

These are plain containers. The transitions that mutate them live in
``idlestat.analysis``; this module only knows how to fold a closed interval
into running statistics and how to keep the P-state slot list ordered.
"""

import bisect
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

# Number of C-state slots tracked per entity.
MAX_CSTATE = 16


class Residency(Enum):
    """How the last closed idle interval compared with its break-even time."""
    AS_EXPECTED = "as_expected"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"


@dataclass
class IntervalStats:
    """
    Running statistics over closed intervals, all durations in microseconds.
    """

    # Number of closed intervals folded in.
    count: int = 0
    # Shortest interval seen; infinite until the first sample.
    min_time: float = math.inf
    # Longest interval seen.
    max_time: float = 0.0
    # Running arithmetic mean.
    avg_time: float = 0.0
    # Sum of all intervals.
    duration: float = 0.0

    def add_sample(self, elapsed: float) -> None:
        """Fold one closed interval into the statistics."""
        self.avg_time += (elapsed - self.avg_time) / (self.count + 1)
        self.count += 1
        self.duration += elapsed
        if elapsed < self.min_time:
            self.min_time = elapsed
        if elapsed > self.max_time:
            self.max_time = elapsed

    @property
    def reported_min_time(self) -> float:
        """Minimum as shown in reports: 0 when nothing was recorded."""
        return self.min_time if self.count else 0.0


@dataclass
class CState(IntervalStats):
    """One idle depth of an entity."""

    # Display name, None when the depth is not supported.
    name: Optional[str] = None
    # Break-even residency in microseconds, -1 when unknown.
    target_residency: int = -1
    # Intervals shorter than the target residency.
    early_wakings: int = 0
    # Intervals long enough that the next deeper state would have paid off.
    late_wakings: int = 0

    @property
    def as_expected(self) -> int:
        return self.count - self.early_wakings - self.late_wakings


@dataclass
class PState(IntervalStats):
    """One frequency slot of an entity, frequency in Hz."""

    freq: int = 0


@dataclass
class WakeupIrq:
    """Wake-up counters attributed to a single interrupt source."""

    # Interrupt number, -1 for inter-processor interrupts.
    irq_id: int
    name: str
    count: int = 0
    early_triggers: int = 0
    late_triggers: int = 0

    @property
    def is_ipi(self) -> bool:
        return self.irq_id == -1

    @property
    def label(self) -> str:
        return "IPI" if self.is_ipi else "IRQ"


class WakeupTable:
    """Per-CPU wake-up sources keyed by (irq id, name), in first-seen order."""

    def __init__(self) -> None:
        self._entries: Dict[Tuple[int, str], WakeupIrq] = {}

    def get_or_create(self, irq_id: int, name: str) -> WakeupIrq:
        key = (irq_id, name)
        entry = self._entries.get(key)
        if entry is None:
            entry = WakeupIrq(irq_id=irq_id, name=name)
            self._entries[key] = entry
        return entry

    def get(self, irq_id: int, name: str) -> Optional[WakeupIrq]:
        return self._entries.get((irq_id, name))

    def __iter__(self) -> Iterator[WakeupIrq]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


def _empty_cstates() -> List[CState]:
    return [CState() for _ in range(MAX_CSTATE)]


@dataclass
class CStateTrack:
    """
    C-state machine data for one CPU, core or cluster.
    """

    states: List[CState] = field(default_factory=_empty_cstates)
    # Depth of the open idle interval, -1 while running.
    current_cstate: int = -1
    # Deepest depth ever entered, -1 until the first entry.
    cstate_max: int = -1
    # Start of the open interval, seconds.
    begin_time: float = 0.0
    # Classification of the last closed interval.
    actual_residency: Residency = Residency.AS_EXPECTED
    # Wake-up source already charged for the last wake-up, if any.
    wakeirq: Optional[WakeupIrq] = None

    @property
    def is_idle(self) -> bool:
        return self.current_cstate != -1

    def target_of(self, depth: int) -> int:
        """Target residency of ``depth``, -1 when unknown or out of range."""
        if 0 <= depth < MAX_CSTATE:
            return self.states[depth].target_residency
        return -1


@dataclass
class PStateTrack:
    """
    P-state machine data for one CPU, core or cluster.

    ``states`` is always sorted by ascending frequency.
    """

    states: List[PState] = field(default_factory=list)
    # Index of the selected slot, -1 when the frequency is unknown.
    current: int = -1
    # Whether the owner is idle; dwell time is not accrued while idle.
    idle: bool = False
    # Start of the open dwell, seconds.
    time_enter: float = 0.0

    @property
    def freqs(self) -> List[int]:
        return [state.freq for state in self.states]

    @property
    def current_freq(self) -> int:
        """Selected frequency in Hz, 0 when unknown."""
        if self.current == -1:
            return 0
        return self.states[self.current].freq

    def find(self, freq: int) -> int:
        """Index of the slot for ``freq``, or -1."""
        index = bisect.bisect_left(self.freqs, freq)
        if index < len(self.states) and self.states[index].freq == freq:
            return index
        return -1

    def insert_slot(self, freq: int) -> int:
        """
        Insert an empty slot for ``freq`` keeping the list sorted.

        The selected index is shifted when the new slot lands at or before it.

        Returns:
            Index of the new slot
        """
        index = bisect.bisect_left(self.freqs, freq)
        self.states.insert(index, PState(freq=freq))
        if self.current != -1 and index <= self.current:
            self.current += 1
        return index
