"""
Host topology and idle-state discovery from the sysfs CPU tree.

Traces produced by plain ftrace or trace-cmd carry no topology, so it is
read from the host running the analysis, under
``<sysfs_root>/cpu<N>/topology`` and ``<sysfs_root>/cpu<N>/cpuidle/state<S>``.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import psutil

from ..models.states import MAX_CSTATE
from .model import CStateInfo, TopologyEntry

logger = logging.getLogger(__name__)


def host_cpu_count() -> int:
    """Number of logical CPUs on this host, 1 if it cannot be determined."""
    return psutil.cpu_count(logical=True) or 1


def _cpu_dirs(root: Path) -> List[Path]:
    if not root.is_dir():
        return []
    dirs = []
    for cpu_dir in root.iterdir():
        suffix = cpu_dir.name[3:]
        if cpu_dir.is_dir() and cpu_dir.name.startswith("cpu") and suffix.isdigit():
            dirs.append(cpu_dir)
    return sorted(dirs, key=lambda d: int(d.name[3:]))


def _read_int(path: Path) -> Optional[int]:
    try:
        return int(path.read_text().strip())
    except (OSError, ValueError):
        return None


def _is_online(cpu_dir: Path) -> bool:
    # cpu0 usually has no 'online' file and cannot be offlined.
    online = _read_int(cpu_dir / "online")
    return online is None or online == 1


def read_sysfs_topology(sysfs_root: Union[str, Path]) -> List[TopologyEntry]:
    """
    Read the placement of every online CPU.

    The physical package becomes the cluster. Cores are flagged as
    multi-threaded when their thread sibling list names more than one CPU.

    Returns:
        One entry per online CPU with a topology directory, possibly empty
    """
    root = Path(sysfs_root)
    entries: List[TopologyEntry] = []
    for cpu_dir in _cpu_dirs(root):
        if not _is_online(cpu_dir):
            logger.debug(f"Skipping offline {cpu_dir.name}")
            continue
        cpu_id = int(cpu_dir.name[3:])
        topo_dir = cpu_dir / "topology"
        package_id = _read_int(topo_dir / "physical_package_id")
        core_id = _read_int(topo_dir / "core_id")
        if package_id is None or core_id is None:
            continue
        try:
            siblings = (topo_dir / "thread_siblings_list").read_text().strip()
        except OSError:
            siblings = ""
        is_ht = "," in siblings or "-" in siblings
        entries.append(TopologyEntry(max(package_id, 0), core_id, cpu_id, is_ht))
    logger.debug(f"Read topology of {len(entries)} CPUs from {root}")
    return entries


def read_sysfs_cstates(sysfs_root: Union[str, Path],
                       cpu_ids: List[int]) -> Dict[int, CStateInfo]:
    """
    Read idle state names and target residencies for the given CPUs.

    CPUs without a cpuidle directory get no entry.
    """
    root = Path(sysfs_root)
    result: Dict[int, CStateInfo] = {}
    for cpu_id in cpu_ids:
        cpuidle_dir = root / f"cpu{cpu_id}" / "cpuidle"
        if not cpuidle_dir.is_dir():
            continue
        info = CStateInfo()
        for depth in range(MAX_CSTATE):
            state_dir = cpuidle_dir / f"state{depth}"
            if not state_dir.is_dir():
                break
            try:
                info.names[depth] = (state_dir / "name").read_text().strip()
            except OSError:
                info.names[depth] = f"state{depth}"
            residency = _read_int(state_dir / "residency")
            if residency is None:
                residency = _read_int(state_dir / "target_residency")
            info.residencies[depth] = residency if residency is not None else -1
        result[cpu_id] = info
    return result


def flat_topology(nr_cpus: int) -> List[TopologyEntry]:
    """One single-CPU core per CPU, all in cluster A."""
    return [TopologyEntry(0, cpu_id, cpu_id) for cpu_id in range(nr_cpus)]
