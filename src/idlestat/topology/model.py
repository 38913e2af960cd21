"""
Topology model: clusters own cores, cores own CPUs.

Every node carries its own C-state and P-state tracks. CPU tracks are fed
directly from trace events; core and cluster tracks are derived from their
members during replay. A flat ``cpu_id -> (cluster, core, cpu)`` index gives
constant-time dispatch of events.
"""

import bisect
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from ..models.states import MAX_CSTATE, CStateTrack, PStateTrack, WakeupTable
from ..validation import MalformedTopologyError, StructuralInputError

logger = logging.getLogger(__name__)


@dataclass
class TopologyEntry:
    """One CPU placement as read from a trace header or sysfs."""

    cluster_id: int
    core_id: int
    cpu_id: int
    # Whether the owning core is declared as hosting several hardware threads.
    is_ht: bool = False


@dataclass
class CStateInfo:
    """Idle state names and target residencies (us) of one CPU, by depth."""

    names: List[Optional[str]] = field(default_factory=lambda: [None] * MAX_CSTATE)
    residencies: List[int] = field(default_factory=lambda: [-1] * MAX_CSTATE)

    @classmethod
    def from_pairs(cls, pairs: Sequence[Tuple[Optional[str], int]]) -> "CStateInfo":
        """Build from ``(name, residency)`` pairs, depth 0 first."""
        if len(pairs) > MAX_CSTATE:
            raise MalformedTopologyError(
                f"{len(pairs)} idle states declared, at most {MAX_CSTATE} supported")
        info = cls()
        for depth, (name, residency) in enumerate(pairs):
            info.names[depth] = name
            info.residencies[depth] = residency
        return info

    def apply_to(self, track: CStateTrack) -> None:
        for depth in range(MAX_CSTATE):
            track.states[depth].name = self.names[depth]
            track.states[depth].target_residency = self.residencies[depth]


def _copy_state_info(source: CStateTrack, target: CStateTrack) -> None:
    for src, dst in zip(source.states, target.states):
        dst.name = src.name
        dst.target_residency = src.target_residency


class Cpu:
    """A logical CPU and its primitive state tracks."""

    def __init__(self, cpu_id: int):
        self.id = cpu_id
        self.cstates = CStateTrack()
        self.pstates = PStateTrack()
        self.wakeups = WakeupTable()

    @property
    def label(self) -> str:
        return f"cpu{self.id}"

    def __repr__(self) -> str:
        return f"Cpu(id={self.id})"


class Core:
    """A physical core grouping one or more hardware threads."""

    def __init__(self, core_id: int, is_ht: bool = False):
        self.id = core_id
        self._declared_ht = is_ht
        self.cpus: List[Cpu] = []
        self.cstates = CStateTrack()
        self.pstates = PStateTrack()

    @property
    def is_ht(self) -> bool:
        return self._declared_ht or len(self.cpus) > 1

    @property
    def label(self) -> str:
        return f"core{self.id}"

    def add_cpu(self, cpu: Cpu) -> None:
        index = bisect.bisect_left([c.id for c in self.cpus], cpu.id)
        self.cpus.insert(index, cpu)

    def __repr__(self) -> str:
        return f"Core(id={self.id}, cpus={[c.id for c in self.cpus]})"


class Cluster:
    """A group of cores sharing a power or clock domain."""

    def __init__(self, cluster_id: int):
        self.id = cluster_id
        self.cores: List[Core] = []
        self.cstates = CStateTrack()
        self.pstates = PStateTrack()

    @property
    def label(self) -> str:
        return f"cluster{chr(ord('A') + self.id)}"

    @property
    def cpus(self) -> List[Cpu]:
        return [cpu for core in self.cores for cpu in core.cpus]

    def find_core(self, core_id: int) -> Optional[Core]:
        for core in self.cores:
            if core.id == core_id:
                return core
        return None

    def add_core(self, core_id: int, is_ht: bool = False) -> Core:
        core = self.find_core(core_id)
        if core is None:
            core = Core(core_id, is_ht)
            index = bisect.bisect_left([c.id for c in self.cores], core_id)
            self.cores.insert(index, core)
        elif is_ht:
            core._declared_ht = True
        return core

    def __repr__(self) -> str:
        return f"Cluster(id={self.id}, cores={[c.id for c in self.cores]})"


Node = Union[Cluster, Core, Cpu]


class Topology:
    """
    Ownership tree of clusters, cores and CPUs with an id index over CPUs.

    Clusters, cores and CPUs are kept in ascending id order so that report
    traversal is deterministic.
    """

    def __init__(self) -> None:
        self.clusters: List[Cluster] = []
        self._index: Dict[int, Tuple[Cluster, Core, Cpu]] = {}

    @classmethod
    def from_entries(
        cls,
        entries: Sequence[TopologyEntry],
        cstate_info: Optional[Dict[int, CStateInfo]] = None
    ) -> "Topology":
        """
        Build and validate a topology from CPU placements.

        Args:
            entries: One entry per CPU
            cstate_info: Idle state description per CPU id, optional

        Raises:
            MalformedTopologyError: On duplicate CPUs or an empty description
        """
        topology = cls()
        for entry in entries:
            topology.add_cpu(entry.cluster_id, entry.core_id, entry.cpu_id, entry.is_ht)
        topology.validate()
        topology.setup_states(cstate_info or {})
        return topology

    def find_cluster(self, cluster_id: int) -> Optional[Cluster]:
        for cluster in self.clusters:
            if cluster.id == cluster_id:
                return cluster
        return None

    def add_cluster(self, cluster_id: int) -> Cluster:
        if cluster_id < 0 or cluster_id > 25:
            raise MalformedTopologyError(f"cluster id {cluster_id} out of range")
        cluster = self.find_cluster(cluster_id)
        if cluster is None:
            cluster = Cluster(cluster_id)
            index = bisect.bisect_left([c.id for c in self.clusters], cluster_id)
            self.clusters.insert(index, cluster)
        return cluster

    def add_cpu(self, cluster_id: int, core_id: int, cpu_id: int,
                is_ht: bool = False) -> Cpu:
        """
        Place a CPU, creating its cluster and core on demand.

        Raises:
            MalformedTopologyError: If the CPU id is already placed
        """
        if cpu_id in self._index:
            raise MalformedTopologyError(f"cpu{cpu_id} declared more than once")
        cluster = self.add_cluster(cluster_id)
        core = cluster.add_core(core_id, is_ht)
        cpu = Cpu(cpu_id)
        core.add_cpu(cpu)
        self._index[cpu_id] = (cluster, core, cpu)
        return cpu

    def validate(self) -> None:
        """
        Raises:
            MalformedTopologyError: If the tree is empty or has an empty group
        """
        if not self.clusters:
            raise MalformedTopologyError("topology declares no CPU")
        for cluster in self.clusters:
            if not cluster.cores:
                raise MalformedTopologyError(f"{cluster.label} has no core")
            for core in cluster.cores:
                if not core.cpus:
                    raise MalformedTopologyError(
                        f"{core.label} of {cluster.label} has no CPU")

    def setup_states(self, cstate_info: Dict[int, CStateInfo]) -> None:
        """
        Name the idle states of every node.

        CPUs take their own description; a core copies its first CPU and a
        cluster copies its first core.
        """
        for cluster_id, core_id, cpu in self.iter_placements():
            info = cstate_info.get(cpu.id)
            if info is not None:
                info.apply_to(cpu.cstates)
        for cluster in self.clusters:
            for core in cluster.cores:
                _copy_state_info(core.cpus[0].cstates, core.cstates)
            _copy_state_info(cluster.cores[0].cstates, cluster.cstates)

    def lookup(self, cpu_id: int) -> Tuple[Cluster, Core, Cpu]:
        """
        Raises:
            StructuralInputError: If no CPU with this id exists
        """
        try:
            return self._index[cpu_id]
        except KeyError:
            raise StructuralInputError(f"unknown cpu{cpu_id}", cpu=cpu_id) from None

    def get_cpu(self, cpu_id: int) -> Cpu:
        return self.lookup(cpu_id)[2]

    def __contains__(self, cpu_id: int) -> bool:
        return cpu_id in self._index

    @property
    def nr_cpus(self) -> int:
        return len(self._index)

    @property
    def cpus(self) -> List[Cpu]:
        return [self._index[cpu_id][2] for cpu_id in sorted(self._index)]

    @property
    def cores(self) -> List[Core]:
        return [core for cluster in self.clusters for core in cluster.cores]

    def iter_placements(self) -> Iterator[Tuple[int, int, Cpu]]:
        """Yield ``(cluster_id, core_id, cpu)`` in tree order."""
        for cluster in self.clusters:
            for core in cluster.cores:
                for cpu in core.cpus:
                    yield cluster.id, core.id, cpu

    def walk(self) -> Iterator[Tuple[str, Node]]:
        """
        Yield ``(label, node)`` in report order.

        Each cluster comes first, then for every core its own entry (only for
        cores with several CPUs) followed by its CPUs.
        """
        for label, node, _ in self.walk_paired(None):
            yield label, node

    def walk_paired(self, other: Optional["Topology"]) -> Iterator[Tuple[str, Node, Optional[Node]]]:
        """
        Like ``walk`` but also yield the node of ``other`` at the same place.

        Nodes are matched by cluster, core and CPU id; the third item is None
        when ``other`` is None or has no such node.
        """
        for cluster in self.clusters:
            other_cluster = other.find_cluster(cluster.id) if other is not None else None
            yield cluster.label, cluster, other_cluster
            for core in cluster.cores:
                other_core = other_cluster.find_core(core.id) if other_cluster is not None else None
                if core.is_ht:
                    yield core.label, core, other_core
                for cpu in core.cpus:
                    other_cpu = None
                    if other is not None and cpu.id in other:
                        other_cpu = other.get_cpu(cpu.id)
                    yield cpu.label, cpu, other_cpu

    def __repr__(self) -> str:
        return f"Topology(clusters={self.clusters!r})"
