"""
CPU topology: the cluster / core / CPU tree and host discovery.
"""

from .model import CStateInfo, Cluster, Core, Cpu, Topology, TopologyEntry
from .sysfs import flat_topology, host_cpu_count, read_sysfs_cstates, read_sysfs_topology

__all__ = [
    "CStateInfo",
    "Cluster",
    "Core",
    "Cpu",
    "Topology",
    "TopologyEntry",
    "flat_topology",
    "host_cpu_count",
    "read_sysfs_cstates",
    "read_sysfs_topology",
]
