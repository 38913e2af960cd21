r"""
Native idlestat trace files.

Layout::

    idlestat version = 0.6
    cpus=4
    clusterA:
    \tcore0
    \t\tcpu0
    \t\tcpu1
    clusterB:
    \tcpu2
    cpuid 0:
    \tC1
    \t1
    \t(null)
    \t-1
    ...
    <ftrace records>

A CPU listed directly under a cluster is a core of its own whose id is the
CPU id. Each online CPU has a ``cpuid N:`` block of 16 name/residency pairs.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..models.config import TraceConfig
from ..models.states import MAX_CSTATE
from ..topology.model import CStateInfo, Topology, TopologyEntry
from ..topology.sysfs import flat_topology
from ..validation import TraceFormatError
from .base import LoadedTrace, TraceFormat, iter_records, read_header_lines
from .parsing import RecordParser

logger = logging.getLogger(__name__)

MAGIC = "idlestat version"

_CPUS = re.compile(r"^cpus=(\d+)")
_CLUSTER = re.compile(r"^cluster([A-Z]):?\s*$")
_CORE = re.compile(r"^\tcore(\d+)\s*$")
_CORE_CPU = re.compile(r"^\t\tcpu(\d+)\s*$")
_CLUSTER_CPU = re.compile(r"^\tcpu(\d+)\s*$")
_CPUID = re.compile(r"^cpuid (\d+):")


def parse_topology_block(lines: List[str], start: int) -> Tuple[List[TopologyEntry], int]:
    """
    Decode the cluster/core/cpu block beginning at ``lines[start]``.

    Returns:
        The CPU placements and the index of the first line after the block
    """
    entries: List[TopologyEntry] = []
    index = start
    cluster_id: Optional[int] = None
    core_id: Optional[int] = None
    while index < len(lines):
        line = lines[index]
        cluster = _CLUSTER.match(line)
        core = _CORE.match(line)
        core_cpu = _CORE_CPU.match(line)
        cluster_cpu = _CLUSTER_CPU.match(line)
        if cluster:
            cluster_id = ord(cluster.group(1)) - ord("A")
            core_id = None
        elif core and cluster_id is not None:
            core_id = int(core.group(1))
        elif core_cpu and core_id is not None:
            # A core line marks a multi-CPU core even if only one sibling was online.
            entries.append(TopologyEntry(cluster_id, core_id, int(core_cpu.group(1)), is_ht=True))
        elif cluster_cpu and cluster_id is not None:
            cpu_id = int(cluster_cpu.group(1))
            core_id = None
            entries.append(TopologyEntry(cluster_id, cpu_id, cpu_id))
        else:
            break
        index += 1
    return entries, index


def parse_cstate_blocks(lines: List[str], start: int,
                        cpu_ids: List[int]) -> Tuple[Dict[int, CStateInfo], int]:
    """
    Decode one ``cpuid N:`` block per CPU in ``cpu_ids``, in order.

    Raises:
        TraceFormatError: If a block is missing or truncated
    """
    result: Dict[int, CStateInfo] = {}
    index = start
    for cpu_id in cpu_ids:
        header = _CPUID.match(lines[index]) if index < len(lines) else None
        if header is None or int(header.group(1)) != cpu_id:
            found = lines[index] if index < len(lines) else "<end of header>"
            raise TraceFormatError(f"Expected 'cpuid {cpu_id}:', read '{found}'")
        index += 1
        pairs = []
        for depth in range(MAX_CSTATE):
            if index + 1 >= len(lines):
                raise TraceFormatError(f"Truncated idle state list for cpu{cpu_id}")
            name = lines[index].strip()
            try:
                residency = int(lines[index + 1].strip())
            except ValueError:
                raise TraceFormatError(
                    f"Invalid residency '{lines[index + 1].strip()}' for cpu{cpu_id} state {depth}")
            pairs.append((None if name == "(null)" else name, residency))
            index += 2
        result[cpu_id] = CStateInfo.from_pairs(pairs)
    return result, index


class IdlestatNativeFormat(TraceFormat):
    """Trace files recorded by idlestat itself."""

    name = "idlestat native"

    def check_magic(self, first_line: str) -> bool:
        return first_line.startswith(MAGIC)

    def load(self, path: Union[str, Path],
             config: Optional[TraceConfig] = None) -> LoadedTrace:
        lines = read_header_lines(path)
        if len(lines) < 2:
            raise TraceFormatError(f"Error or EOF while reading {path}")

        cpus = _CPUS.match(lines[1])
        nrcpus = int(cpus.group(1)) if cpus else 0
        if nrcpus == 0:
            raise TraceFormatError(f"Cannot load trace file {path} (nrcpus == 0)")

        entries, index = parse_topology_block(lines, 2)
        if not entries:
            logger.info(f"No topology in {path}, assuming {nrcpus} independent CPUs")
            entries = flat_topology(nrcpus)

        online = sorted(e.cpu_id for e in entries if e.cpu_id < nrcpus)
        cstates, index = parse_cstate_blocks(lines, index, online)

        topology = Topology.from_entries(entries, cstates)

        logger.debug(f"Loaded native trace header of {path}: {nrcpus} CPUs")
        return LoadedTrace(
            path=Path(path),
            format_name=self.name,
            nrcpus=nrcpus,
            topology=topology,
            events=iter_records(path, index, RecordParser(has_flags=True)),
        )
