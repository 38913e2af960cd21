"""
Walks a finished topology and feeds its tables to a report.

Rows with no recorded interval are skipped, unless the baseline has data for
the same row. Entities without any row print nothing, header included.
"""

import logging
from typing import Iterable, Optional

from ..models.states import CState, CStateTrack, PStateTrack
from ..topology.model import Cpu, Topology
from .base import Report

logger = logging.getLogger(__name__)

IDLE = "idle"
FREQUENCY = "frequency"
WAKEUP = "wakeup"


def _display_cstates(report: Report, label: str, track: CStateTrack,
                     baseline: Optional[CStateTrack]) -> None:
    last_depth = track.cstate_max
    if baseline is not None:
        last_depth = max(last_depth, baseline.cstate_max)

    header = False
    for depth in range(last_depth + 1):
        state = track.states[depth]
        base = baseline.states[depth] if baseline is not None else None
        base_has_data = base is not None and base.count > 0
        if state.count == 0 and not base_has_data:
            continue
        if not header:
            report.cstate_cpu_header(label)
            header = True
        if state.count == 0:
            state = CState(name=state.name or base.name,
                           target_residency=state.target_residency)
        report.cstate_single_state(state, base if base_has_data else None)
    if header:
        report.cstate_end_cpu()


def _display_pstates(report: Report, label: str, track: PStateTrack,
                     baseline: Optional[PStateTrack]) -> None:
    header = False
    for pstate in track.states:
        base = None
        if baseline is not None:
            index = baseline.find(pstate.freq)
            if index != -1 and baseline.states[index].count > 0:
                base = baseline.states[index]
        if pstate.count == 0 and base is None:
            continue
        if not header:
            report.pstate_cpu_header(label)
            header = True
        report.pstate_single_freq(pstate, base)
    if header:
        report.pstate_end_cpu()


def dump_cstates(report: Report, topology: Topology,
                 baseline: Optional[Topology] = None) -> None:
    report.cstate_table_header()
    for label, node, base_node in topology.walk_paired(baseline):
        _display_cstates(report, label, node.cstates,
                         base_node.cstates if base_node is not None else None)
    report.cstate_table_footer()


def dump_pstates(report: Report, topology: Topology,
                 baseline: Optional[Topology] = None) -> None:
    report.pstate_table_header()
    for label, node, base_node in topology.walk_paired(baseline):
        _display_pstates(report, label, node.pstates,
                         base_node.pstates if base_node is not None else None)
    report.pstate_table_footer()


def dump_wakeups(report: Report, topology: Topology) -> None:
    report.wakeup_table_header()
    for label, node in topology.walk():
        if not isinstance(node, Cpu) or not len(node.wakeups):
            continue
        report.wakeup_cpu_header(label)
        for irq in node.wakeups:
            report.wakeup_single_irq(irq)
        report.wakeup_end_cpu()
    report.wakeup_table_footer()


def render(report: Report, topology: Topology, display: Iterable[str],
           baseline: Optional[Topology] = None) -> None:
    """
    Print the selected tables in order.

    Args:
        report: Renderer receiving the rows
        topology: Analysed topology
        display: Any of "idle", "frequency" and "wakeup"
        baseline: Analysed baseline topology for comparison rows
    """
    for section in display:
        if section == IDLE:
            dump_cstates(report, topology, baseline)
        elif section == FREQUENCY:
            dump_pstates(report, topology, baseline)
        elif section == WAKEUP:
            dump_wakeups(report, topology)
        else:
            raise ValueError(f"Unknown report section: {section}")
        logger.debug(f"Rendered {section} table with {report.name} report")
