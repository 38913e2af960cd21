"""
Derivation of core and cluster state from their members.

A group's state is recomputed from scratch after every member change and
then fed to the group's own state machines as if it were a primitive event.
"""

import logging
from typing import Sequence, Union

from ..models.config import DEFAULT_COMPOSITE_FREQUENCY, CompositeFrequency
from ..topology.model import Cluster, Core, Cpu
from .cstates import record_cstate_event
from .pstates import record_group_freq

logger = logging.getLogger(__name__)

Member = Union[Cpu, Core]
Group = Union[Core, Cluster]


def composite_depth(members: Sequence[Member]) -> int:
    """
    Shallowest current depth among members, -1 if any member is running.
    """
    return min(member.cstates.current_cstate for member in members)


def composite_frequency(
    members: Sequence[Member],
    extremum: CompositeFrequency = DEFAULT_COMPOSITE_FREQUENCY
) -> int:
    """
    Representative frequency of running members with a known frequency.

    Args:
        members: CPUs of a core, or cores of a cluster
        extremum: Whether the lowest or highest member frequency is used

    Returns:
        Frequency in Hz, 0 when no member qualifies
    """
    freqs = [
        member.pstates.current_freq
        for member in members
        if not member.cstates.is_idle and member.pstates.current != -1
    ]
    if not freqs:
        return 0
    if extremum is CompositeFrequency.MAX:
        return max(freqs)
    return min(freqs)


def update_group(
    group: Group,
    members: Sequence[Member],
    time: float,
    extremum: CompositeFrequency = DEFAULT_COMPOSITE_FREQUENCY,
    verbose: int = 0
) -> None:
    """Recompute and apply the composite C-state and P-state of ``group``."""
    depth = composite_depth(members)
    if record_cstate_event(group.cstates, time, depth, verbose) and verbose > 1:
        logger.debug(f"{group.label} now at depth {depth} at {time:.6f}")
    record_group_freq(group.pstates, time, composite_frequency(members, extremum))


def update_hierarchy(
    cluster: Cluster,
    core: Core,
    time: float,
    extremum: CompositeFrequency = DEFAULT_COMPOSITE_FREQUENCY,
    verbose: int = 0
) -> None:
    """Propagate a CPU change to its core, then to its cluster."""
    update_group(core, core.cpus, time, extremum, verbose)
    update_group(cluster, cluster.cores, time, extremum, verbose)
