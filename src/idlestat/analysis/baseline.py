"""
Alignment of P-state tables between a run and its baseline.

After merging, every entity present in both trees has the same frequency
slots in the same order on both sides, so comparison reports can walk the two
tables row by row. Slots are only ever inserted with zero statistics.
"""

import logging

from ..models.states import PStateTrack
from ..topology.model import Topology
from ..validation import InconsistentBaseline
from .pstates import alloc_pstate

logger = logging.getLogger(__name__)


def merge_pstate_tracks(current: PStateTrack, baseline: PStateTrack) -> int:
    """
    Insert zero slots into either track until both hold the same frequencies.

    Returns:
        Number of slots inserted across both tracks
    """
    inserted = 0
    index = 0
    while index < len(current.states) or index < len(baseline.states):
        cur_freq = current.states[index].freq if index < len(current.states) else None
        base_freq = baseline.states[index].freq if index < len(baseline.states) else None
        if cur_freq != base_freq:
            if base_freq is None or (cur_freq is not None and cur_freq < base_freq):
                alloc_pstate(baseline, cur_freq)
            else:
                alloc_pstate(current, base_freq)
            inserted += 1
        index += 1
    return inserted


def merge_pstates(current: Topology, baseline: Topology) -> None:
    """
    Align the P-state tables of ``current`` and ``baseline`` in place.

    CPUs are matched by id. Cores and clusters are merged when both trees
    have a group with the same id.

    Raises:
        InconsistentBaseline: If the trees do not describe the same CPUs
    """
    if current.nr_cpus != baseline.nr_cpus:
        raise InconsistentBaseline(
            f"baseline has {baseline.nr_cpus} CPUs, current trace has {current.nr_cpus}")

    inserted = 0
    for cpu in current.cpus:
        if cpu.id not in baseline:
            raise InconsistentBaseline(f"{cpu.label} missing from baseline")
        inserted += merge_pstate_tracks(cpu.pstates, baseline.get_cpu(cpu.id).pstates)

    for cluster in current.clusters:
        other_cluster = baseline.find_cluster(cluster.id)
        if other_cluster is None:
            continue
        inserted += merge_pstate_tracks(cluster.pstates, other_cluster.pstates)
        for core in cluster.cores:
            other_core = other_cluster.find_core(core.id)
            if other_core is not None:
                inserted += merge_pstate_tracks(core.pstates, other_core.pstates)

    logger.debug(f"Baseline merge inserted {inserted} empty P-state slots")
