"""
Pytest configuration and shared fixtures for the idlestat test suite.

This module provides common fixtures, trace builders and configuration
for all test modules in the idlestat project.
"""

import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from idlestat.topology import CStateInfo, Topology, TopologyEntry  # noqa: E402


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================

# WFI, C1 and C2 with break-even residencies of 1us, 1ms and 5ms.
SAMPLE_CSTATES = [("WFI", 1), ("C1", 1000), ("C2", 5000)]


@pytest.fixture
def temp_dir(tmp_path):
    """Temporary directory for test files."""
    return tmp_path


@pytest.fixture
def sample_cstate_info():
    """Idle state description shared by all CPUs of the sample topologies."""
    return CStateInfo.from_pairs(SAMPLE_CSTATES)


@pytest.fixture
def single_cpu_topology(sample_cstate_info):
    """One cluster, one core, one CPU."""
    return Topology.from_entries([TopologyEntry(0, 0, 0)], {0: sample_cstate_info})


@pytest.fixture
def ht_core_topology(sample_cstate_info):
    """One cluster with a single core hosting cpu0 and cpu1."""
    entries = [TopologyEntry(0, 0, 0, is_ht=True), TopologyEntry(0, 0, 1, is_ht=True)]
    return Topology.from_entries(entries, {0: sample_cstate_info, 1: sample_cstate_info})


@pytest.fixture
def quad_topology(sample_cstate_info):
    """
    Two clusters: A holds core0 (cpu0, cpu1) and core1 (cpu2, cpu3);
    B holds single-CPU cores 4 and 5.
    """
    entries = [
        TopologyEntry(0, 0, 0), TopologyEntry(0, 0, 1),
        TopologyEntry(0, 1, 2), TopologyEntry(0, 1, 3),
        TopologyEntry(1, 4, 4), TopologyEntry(1, 5, 5),
    ]
    return Topology.from_entries(entries, {e.cpu_id: sample_cstate_info for e in entries})


@pytest.fixture
def sample_config_data():
    """Sample configuration data for testing."""
    return {
        "analysis": {
            "composite_frequency": "min",
            "verbose": 0,
        },
        "report": {
            "format": "default",
            "display": ["idle", "frequency"],
        },
        "trace": {
            "sysfs_root": "/sys/devices/system/cpu",
        },
        "storage": {
            "format": "parquet",
            "compression": "snappy",
        },
    }


@pytest.fixture
def config_files(temp_dir, sample_config_data):
    """Create a config.toml in a temporary directory."""
    import toml

    config_file = temp_dir / "config.toml"
    with open(config_file, "w") as f:
        toml.dump(sample_config_data, f)

    return {"config": config_file, "dir": temp_dir}


# ============================================================================
# Trace Builders
# ============================================================================


class TestUtils:
    """Helpers for writing trace files."""

    __test__ = False

    @staticmethod
    def idle_line(time: float, cpu: int, state: int, flags: bool = True) -> str:
        column = " d..2 " if flags else " "
        return f"          <idle>-0     [{cpu:03d}]{column}  {time:.6f}: cpu_idle: state={state} cpu_id={cpu}"

    @staticmethod
    def idle_exit_line(time: float, cpu: int, flags: bool = True) -> str:
        return TestUtils.idle_line(time, cpu, 4294967295, flags)

    @staticmethod
    def freq_line(time: float, cpu: int, khz: int, flags: bool = True) -> str:
        column = " .... " if flags else " "
        return f"     kworker/0:1-42    [{cpu:03d}]{column}  {time:.6f}: cpu_frequency: state={khz} cpu_id={cpu}"

    @staticmethod
    def irq_line(time: float, cpu: int, irq: int, name: str, flags: bool = True) -> str:
        column = " d.h1 " if flags else " "
        return f"          <idle>-0     [{cpu:03d}]{column}  {time:.6f}: irq_handler_entry: irq={irq} name={name}"

    @staticmethod
    def ipi_line(time: float, cpu: int, reason: str, flags: bool = True) -> str:
        column = " d.h1 " if flags else " "
        return (f"          <idle>-0     [{cpu:03d}]{column}  {time:.6f}: ipi_entry: "
                f"target_mask=00000000,00000001 ({reason})")

    @staticmethod
    def native_header(nrcpus: int, topology_lines: Sequence[str],
                      cstates: Optional[Dict[int, List[Tuple[Optional[str], int]]]] = None) -> List[str]:
        """
        Header of a native trace. CPUs without an entry in ``cstates`` get
        the sample idle states.
        """
        lines = ["idlestat version = 0.6", f"cpus={nrcpus}"]
        lines.extend(topology_lines)
        cpu_ids = []
        for line in topology_lines:
            stripped = line.strip()
            if stripped.startswith("cpu"):
                cpu_ids.append(int(stripped[3:]))
        if not cpu_ids:
            cpu_ids = list(range(nrcpus))
        for cpu_id in sorted(cpu_ids):
            pairs = (cstates or {}).get(cpu_id, SAMPLE_CSTATES)
            lines.append(f"cpuid {cpu_id}:")
            for depth in range(16):
                if depth < len(pairs):
                    name, residency = pairs[depth]
                    lines.append(f"\t{name if name is not None else '(null)'}")
                    lines.append(f"\t{residency}")
                else:
                    lines.append("\t(null)")
                    lines.append("\t-1")
        return lines

    @staticmethod
    def write(path: Path, lines: Sequence[str]) -> Path:
        path.write_text("\n".join(lines) + "\n")
        return path


@pytest.fixture
def test_utils():
    """Provide test utility functions."""
    return TestUtils


@pytest.fixture
def native_trace_file(temp_dir):
    """
    A native trace for two cores in cluster A (cpu0/cpu1 and cpu2/cpu3).

    cpu0 idles 500us in C1 and is woken by irq 42, cpu1 idles 8ms in WFI,
    cpu0 switches between 1.2GHz and 800MHz.
    """
    lines = TestUtils.native_header(4, [
        "clusterA:",
        "\tcore0",
        "\t\tcpu0",
        "\t\tcpu1",
        "\tcore1",
        "\t\tcpu2",
        "\t\tcpu3",
    ])
    lines += [
        TestUtils.freq_line(100.000000, 0, 1200000),
        TestUtils.idle_line(100.001000, 0, 1),
        TestUtils.idle_line(100.001000, 1, 0),
        TestUtils.idle_exit_line(100.001500, 0),
        TestUtils.irq_line(100.001500, 0, 42, "eth0"),
        TestUtils.freq_line(100.002000, 0, 800000),
        TestUtils.idle_exit_line(100.009000, 1),
        TestUtils.ipi_line(100.009000, 1, "Rescheduling interrupts"),
        TestUtils.freq_line(100.010000, 0, 1200000),
    ]
    return TestUtils.write(temp_dir / "trace.txt", lines)


@pytest.fixture
def fake_sysfs(temp_dir):
    """
    Build a fake /sys/devices/system/cpu tree.

    Returns a function taking ``{cpu_id: (package_id, core_id, siblings)}``
    and an optional list of ``(name, residency)`` idle states, returning the
    root path.
    """
    def _build(cpus: Dict[int, Tuple[int, int, str]],
               cstates: Optional[List[Tuple[str, int]]] = None,
               offline: Sequence[int] = ()) -> Path:
        root = temp_dir / "sys" / "devices" / "system" / "cpu"
        for cpu_id, (package_id, core_id, siblings) in cpus.items():
            cpu_dir = root / f"cpu{cpu_id}"
            topo_dir = cpu_dir / "topology"
            topo_dir.mkdir(parents=True)
            (topo_dir / "physical_package_id").write_text(f"{package_id}\n")
            (topo_dir / "core_id").write_text(f"{core_id}\n")
            (topo_dir / "thread_siblings_list").write_text(f"{siblings}\n")
            if cpu_id != 0:
                (cpu_dir / "online").write_text("0\n" if cpu_id in offline else "1\n")
            for depth, (name, residency) in enumerate(cstates or []):
                state_dir = cpu_dir / "cpuidle" / f"state{depth}"
                state_dir.mkdir(parents=True)
                (state_dir / "name").write_text(f"{name}\n")
                (state_dir / "residency").write_text(f"{residency}\n")
        # Non-CPU entries that live next to the CPU directories.
        (root / "cpufreq").mkdir(parents=True, exist_ok=True)
        (root / "online").write_text("0-3\n")
        return root

    return _build


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    original_config_path = Path(__file__).parent.parent / "conf" / "config.toml"

    yield  # Run the test

    from idlestat.config import clear_config_cache, set_config_path

    clear_config_cache()

    # Always reset to original config path
    set_config_path(original_config_path)
