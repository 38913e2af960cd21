"""
Unit tests for trace file formats and their registry.
"""

import pytest

from idlestat.models.config import TraceConfig
from idlestat.models.events import EventKind
from idlestat.traces import (
    FtraceFormat,
    detect_trace_format,
    get_trace_format,
    list_trace_formats,
    load_trace,
    register_trace_format,
    unregister_trace_format,
)
from idlestat.traces.idlestat_native import parse_cstate_blocks, parse_topology_block
from idlestat.validation import MalformedTopologyError, TraceFormatError


@pytest.mark.unit
class TestNativeFormat:
    """Test cases for native idlestat traces."""

    def test_load(self, native_trace_file):
        trace = load_trace(native_trace_file)

        assert trace.format_name == "idlestat native"
        assert trace.nrcpus == 4
        assert [label for label, _ in trace.topology.walk()] == [
            "clusterA", "core0", "cpu0", "cpu1", "core1", "cpu2", "cpu3",
        ]
        cpu0 = trace.topology.get_cpu(0)
        assert cpu0.cstates.states[1].name == "C1"
        assert cpu0.cstates.states[1].target_residency == 1000
        assert cpu0.cstates.states[3].name is None

        events = list(trace.events)
        assert len(events) == 9
        assert events[0].kind is EventKind.FREQ_CHANGE
        assert events[-1].timestamp == pytest.approx(100.01)

    def test_cpu_directly_under_cluster(self, temp_dir, test_utils):
        lines = test_utils.native_header(2, ["clusterA:", "\tcpu0", "clusterB:", "\tcpu1"])
        lines.append(test_utils.idle_line(1.0, 1, 0))
        path = test_utils.write(temp_dir / "trace.txt", lines)

        topology = load_trace(path).topology

        cluster, core, cpu = topology.lookup(1)
        assert (cluster.label, core.id) == ("clusterB", 1)
        assert not core.is_ht

    def test_missing_topology_uses_flat_layout(self, temp_dir, test_utils):
        lines = test_utils.native_header(2, [])
        path = test_utils.write(temp_dir / "trace.txt", lines)

        topology = load_trace(path).topology

        assert [label for label, _ in topology.walk()] == ["clusterA", "cpu0", "cpu1"]

    def test_zero_cpus(self, temp_dir, test_utils):
        path = test_utils.write(temp_dir / "trace.txt", ["idlestat version = 0.6", "cpus=0"])

        with pytest.raises(TraceFormatError):
            load_trace(path)

    def test_truncated_cstate_block(self, temp_dir, test_utils):
        lines = test_utils.native_header(1, ["clusterA:", "\tcpu0"])[:-6]
        path = test_utils.write(temp_dir / "trace.txt", lines)

        with pytest.raises(TraceFormatError):
            load_trace(path)

    def test_duplicate_cpu_is_fatal(self, temp_dir, test_utils):
        lines = test_utils.native_header(2, ["clusterA:", "\tcore0", "\t\tcpu0", "\t\tcpu0"])
        path = test_utils.write(temp_dir / "trace.txt", lines)

        with pytest.raises(MalformedTopologyError):
            load_trace(path)

    def test_parse_topology_block_stops_at_cpuid(self):
        lines = ["clusterA:", "\tcore0", "\t\tcpu0", "cpuid 0:"]

        entries, index = parse_topology_block(lines, 0)

        assert [(e.cluster_id, e.core_id, e.cpu_id) for e in entries] == [(0, 0, 0)]
        assert index == 3

    def test_core_line_marks_core_with_one_online_cpu(self, temp_dir, test_utils):
        lines = test_utils.native_header(2, ["clusterA:", "\tcore0", "\t\tcpu0", "\tcpu1"])
        path = test_utils.write(temp_dir / "trace.txt", lines)

        topology = load_trace(path).topology

        _, core, _ = topology.lookup(0)
        assert core.is_ht
        assert not topology.lookup(1)[1].is_ht
        assert [label for label, _ in topology.walk()] == ["clusterA", "core0", "cpu0", "cpu1"]

    def test_parse_topology_block_flags_core_entries(self):
        entries, _ = parse_topology_block(["clusterA:", "\tcore0", "\t\tcpu0", "\tcpu1"], 0)

        assert [e.is_ht for e in entries] == [True, False]

    def test_parse_cstate_blocks_wrong_cpu(self):
        with pytest.raises(TraceFormatError):
            parse_cstate_blocks(["cpuid 1:"], 0, [0])


@pytest.mark.unit
class TestHostTopologyFormats:
    """Test cases for ftrace and trace-cmd inputs, which use the host topology."""

    def test_ftrace(self, temp_dir, test_utils, fake_sysfs):
        root = fake_sysfs({0: (0, 0, "0-1"), 1: (0, 0, "0-1"), 2: (0, 1, "2-3"), 3: (0, 1, "2-3")},
                          cstates=[("WFI", 1), ("C1", 1000)])
        lines = [
            "# tracer: nop",
            "#",
            "# entries-in-buffer/entries-written: 2/2   #P:2",
            "#",
            test_utils.idle_line(1.0, 0, 1),
            test_utils.idle_exit_line(1.01, 0),
        ]
        path = test_utils.write(temp_dir / "trace.txt", lines)

        trace = load_trace(path, TraceConfig(sysfs_root=str(root)))

        assert trace.format_name == "ftrace"
        assert trace.nrcpus == 2
        assert [cpu.id for cpu in trace.topology.cpus] == [0, 1]
        assert trace.topology.get_cpu(0).cstates.states[1].name == "C1"
        assert len(list(trace.events)) == 2

    def test_ftrace_without_host_topology(self, temp_dir, test_utils):
        lines = ["# tracer: nop", "#P:3", test_utils.idle_line(1.0, 2, 0)]
        path = test_utils.write(temp_dir / "trace.txt", lines)

        trace = load_trace(path, TraceConfig(sysfs_root=str(temp_dir / "nosys")))

        assert [label for label, _ in trace.topology.walk()] == ["clusterA", "cpu0", "cpu1", "cpu2"]

    def test_ftrace_without_cpu_count(self, temp_dir, test_utils):
        path = test_utils.write(temp_dir / "trace.txt", ["# tracer: nop", "#"])

        with pytest.raises(TraceFormatError):
            load_trace(path)

    def test_trace_cmd_report(self, temp_dir, test_utils):
        lines = [
            "version = 6",
            "cpus=2",
            test_utils.idle_line(5.0, 1, 0, flags=False),
            test_utils.freq_line(5.5, 1, 900000, flags=False),
            test_utils.idle_exit_line(6.0, 1, flags=False),
        ]
        path = test_utils.write(temp_dir / "report.txt", lines)

        trace = load_trace(path, TraceConfig(sysfs_root=str(temp_dir / "nosys")))

        assert trace.format_name == "trace-cmd report"
        assert trace.nrcpus == 2
        events = list(trace.events)
        assert [e.kind for e in events] == [
            EventKind.IDLE_ENTER, EventKind.FREQ_CHANGE, EventKind.IDLE_EXIT,
        ]
        assert events[1].frequency == 900_000_000


@pytest.mark.unit
class TestTraceFormatRegistry:
    """Test cases for format registration and detection."""

    def test_builtin_formats(self):
        assert list_trace_formats()[:3] == ["idlestat native", "ftrace", "trace-cmd report"]

    def test_unknown_name(self):
        with pytest.raises(TraceFormatError):
            get_trace_format("perf")

    def test_duplicate_registration(self):
        with pytest.raises(ValueError):
            register_trace_format(FtraceFormat())

    def test_register_and_unregister(self):
        class CustomFormat(FtraceFormat):
            name = "custom"

        register_trace_format(CustomFormat())
        try:
            assert get_trace_format("custom").name == "custom"
        finally:
            unregister_trace_format("custom")
        assert "custom" not in list_trace_formats()

    def test_unrecognized_file(self, temp_dir):
        path = temp_dir / "trace.txt"
        path.write_text("hello\n")

        with pytest.raises(TraceFormatError):
            detect_trace_format(path)

    def test_missing_file(self, temp_dir):
        with pytest.raises(TraceFormatError):
            detect_trace_format(temp_dir / "missing.txt")

    def test_explicit_format_name(self, native_trace_file):
        trace = load_trace(native_trace_file, format_name="idlestat native")
        assert trace.nrcpus == 4
