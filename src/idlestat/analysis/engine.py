"""
Event replay driver.

The ``Analyzer`` feeds a time-ordered event stream through the per-CPU state
machines, keeps the owning core and cluster in sync after every CPU change,
and closes whatever is still open when the stream ends.
"""

import logging
from typing import Iterable, Optional, Set

from ..models.config import AnalysisConfig
from ..models.events import EventKind, TraceEvent
from ..topology.model import Topology
from ..validation import ErrorSeverity, StructuralInputError, handle_error
from .baseline import merge_pstates
from .composition import update_hierarchy
from .cstates import record_cstate_event
from .pstates import cpu_change_pstate, enter_idle, exit_idle
from .wakeups import store_irq

logger = logging.getLogger(__name__)


class Analyzer:
    """
    Replays trace events into a topology's state tracks.

    Events must be supplied in recorded order. Events naming an unknown CPU
    or an unsupported idle depth are dropped with a warning; every other
    error aborts the replay.
    """

    def __init__(self, topology: Topology, config: Optional[AnalysisConfig] = None):
        self.topology = topology
        self.config = config or AnalysisConfig()
        self.event_count = 0
        self.dropped_count = 0
        self.begin_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self._reported_cpus: Set[int] = set()
        self._finished = False

    @property
    def duration(self) -> float:
        """Seconds between the first and the last accepted event."""
        if self.begin_time is None or self.end_time is None:
            return 0.0
        return self.end_time - self.begin_time

    def process(self, event: TraceEvent) -> bool:
        """
        Apply one event.

        Returns:
            True if the event was accepted, False if it was dropped
        """
        if self._finished:
            raise RuntimeError("Analyzer.process() called after finish()")
        try:
            self._dispatch(event)
        except StructuralInputError as e:
            self.dropped_count += 1
            self._report_dropped(e, event)
            return False

        self.event_count += 1
        if self.begin_time is None:
            self.begin_time = event.timestamp
        self.end_time = event.timestamp
        return True

    def _report_dropped(self, error: StructuralInputError, event: TraceEvent) -> None:
        # Unknown CPUs tend to repeat for the whole trace; warn once per id.
        if error.cpu is not None and error.cpu in self._reported_cpus:
            logger.debug(f"Dropped {event.kind.value} event: {error}")
            return
        if error.cpu is not None:
            self._reported_cpus.add(error.cpu)
        handle_error(error, f"{event.kind.value} event at {event.timestamp:.6f}",
                     severity=ErrorSeverity.WARNING, reraise=False, logger=logger)

    def _dispatch(self, event: TraceEvent) -> None:
        cluster, core, cpu = self.topology.lookup(event.cpu)
        time = event.timestamp
        verbose = self.config.verbose

        if event.kind is EventKind.WAKEUP:
            store_irq(cpu, event.irq_id, event.irq_name, time if verbose else None)
            return

        if event.kind is EventKind.IDLE_ENTER:
            if record_cstate_event(cpu.cstates, time, event.depth, verbose):
                enter_idle(cpu.pstates, time)
        elif event.kind is EventKind.IDLE_EXIT:
            if record_cstate_event(cpu.cstates, time, -1, verbose):
                exit_idle(cpu.pstates, time)
        elif event.kind is EventKind.FREQ_CHANGE:
            if event.frequency <= 0:
                raise StructuralInputError(
                    f"invalid frequency {event.frequency} for {cpu.label}")
            cpu_change_pstate(cpu.pstates, time, event.frequency)

        update_hierarchy(cluster, core, time, self.config.composite_frequency, verbose)

    def run(self, events: Iterable[TraceEvent]) -> Topology:
        """Process a whole stream and close dangling intervals."""
        for event in events:
            self.process(event)
        return self.finish()

    def finish(self) -> Topology:
        """
        Close every interval still open at the end of the stream.

        Each dangling idle interval is closed at its own start, so it ends
        with zero length and is left out of the statistics. Frequency dwells
        are left as they are.
        """
        if self._finished:
            return self.topology
        verbose = self.config.verbose
        for cluster in self.topology.clusters:
            for core in cluster.cores:
                for cpu in core.cpus:
                    if cpu.cstates.is_idle:
                        record_cstate_event(cpu.cstates, cpu.cstates.begin_time, -1, verbose)
                if core.cstates.is_idle:
                    record_cstate_event(core.cstates, core.cstates.begin_time, -1, verbose)
            if cluster.cstates.is_idle:
                record_cstate_event(cluster.cstates, cluster.cstates.begin_time, -1, verbose)
        self._finished = True

        logger.info(f"Log is {self.duration:f} secs long with {self.event_count} events")
        if self.dropped_count:
            logger.warning(f"Dropped {self.dropped_count} events referencing unknown CPUs or states")
        return self.topology


def analyze(
    topology: Topology,
    events: Iterable[TraceEvent],
    baseline: Optional[Topology] = None,
    config: Optional[AnalysisConfig] = None
) -> Topology:
    """
    Populate ``topology`` from ``events`` and align it with ``baseline``.

    Args:
        topology: Freshly built topology; it is filled in place
        events: Time-ordered event stream
        baseline: Fully analysed topology of an earlier run, optional
        config: Analysis settings, defaults when omitted

    Returns:
        The populated topology

    Raises:
        AllocationFailure: If a state table cannot grow
        InconsistentBaseline: If ``baseline`` covers different CPUs
    """
    Analyzer(topology, config).run(events)
    if baseline is not None:
        merge_pstates(topology, baseline)
    return topology
