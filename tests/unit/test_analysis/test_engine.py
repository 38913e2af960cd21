"""
Unit tests for event replay through the Analyzer.

Covers the partition, time-shift, composite-depth and slot-order properties
and the reference scenarios of the engine.
"""

import random

import pytest

from idlestat.analysis import Analyzer, analyze
from idlestat.models.config import AnalysisConfig, CompositeFrequency
from idlestat.models.events import TraceEvent
from idlestat.topology import CStateInfo, Topology, TopologyEntry


def _quad(cstate_info):
    entries = [
        TopologyEntry(0, 0, 0), TopologyEntry(0, 0, 1),
        TopologyEntry(0, 1, 2), TopologyEntry(0, 1, 3),
    ]
    return Topology.from_entries(entries, {e.cpu_id: cstate_info for e in entries})


def _random_events(seed, count=400, shift=0.0):
    rng = random.Random(seed)
    events = []
    time = 10.0
    for _ in range(count):
        time += rng.uniform(0.00001, 0.01)
        cpu = rng.randrange(4)
        choice = rng.random()
        if choice < 0.4:
            events.append(TraceEvent.idle_enter(time + shift, cpu, rng.randrange(3)))
        elif choice < 0.75:
            events.append(TraceEvent.idle_exit(time + shift, cpu))
        elif choice < 0.9:
            freq = rng.choice([800_000_000, 1_200_000_000, 1_800_000_000, 2_400_000_000])
            events.append(TraceEvent.freq_change(time + shift, cpu, freq))
        else:
            events.append(TraceEvent.wakeup(time + shift, cpu, rng.choice([-1, 27, 42]), "src"))
    return events


def _all_nodes(topology):
    for cluster in topology.clusters:
        yield cluster
        for core in cluster.cores:
            yield core
            yield from core.cpus


@pytest.mark.unit
class TestScenarios:
    """Reference replay scenarios."""

    def test_short_idle_interval(self, single_cpu_topology):
        analyze(single_cpu_topology, [
            TraceEvent.idle_enter(0.0, 0, 1),
            TraceEvent.idle_exit(0.0005, 0),
        ])

        state = single_cpu_topology.get_cpu(0).cstates.states[1]
        assert state.count == 1
        assert state.duration == pytest.approx(500.0)
        assert state.early_wakings == 1

    def test_core_takes_shallowest_depth(self, ht_core_topology):
        analyzer = Analyzer(ht_core_topology)
        analyzer.process(TraceEvent.idle_enter(0.0, 0, 2))
        analyzer.process(TraceEvent.idle_enter(0.0, 1, 1))

        _, core, _ = ht_core_topology.lookup(0)
        assert core.cstates.current_cstate == 1

    def test_repeated_frequency_is_noop(self, quad_topology):
        analyzer = Analyzer(quad_topology)
        analyzer.process(TraceEvent.freq_change(1.0, 2, 1_200_000_000))
        analyzer.process(TraceEvent.freq_change(2.0, 2, 1_200_000_000))

        track = quad_topology.get_cpu(2).pstates
        assert len(track.states) == 1
        assert track.states[0].count == 0
        assert track.time_enter == 1.0

        analyzer.process(TraceEvent.freq_change(3.0, 2, 800_000_000))

        slot = track.states[track.find(1_200_000_000)]
        assert slot.count == 1
        assert slot.duration == pytest.approx(2_000_000.0)

    def test_dangling_idle_enter(self, single_cpu_topology):
        analyzer = Analyzer(single_cpu_topology)
        analyzer.process(TraceEvent.idle_enter(1.0, 0, 0))
        analyzer.finish()

        cluster, core, cpu = single_cpu_topology.lookup(0)
        for node in (cluster, core, cpu):
            assert node.cstates.current_cstate == -1
            assert node.cstates.states[0].count == 0


@pytest.mark.unit
class TestProperties:
    """Properties checked over random event streams."""

    @pytest.mark.parametrize("seed", [1, 7, 42])
    def test_wakings_partition_closed_intervals(self, sample_cstate_info, seed):
        topology = _quad(sample_cstate_info)
        Analyzer(topology).run(_random_events(seed))

        for node in _all_nodes(topology):
            for state in node.cstates.states:
                assert state.early_wakings >= 0
                assert state.late_wakings >= 0
                assert state.as_expected >= 0
                assert state.early_wakings + state.as_expected + state.late_wakings == state.count

    @pytest.mark.parametrize("seed", [3, 11])
    def test_time_shift_invariance(self, sample_cstate_info, seed):
        reference = _quad(sample_cstate_info)
        shifted = _quad(sample_cstate_info)
        Analyzer(reference).run(_random_events(seed))
        Analyzer(shifted).run(_random_events(seed, shift=5000.0))

        for node, other in zip(_all_nodes(reference), _all_nodes(shifted)):
            for state, other_state in zip(node.cstates.states, other.cstates.states):
                assert state.count == other_state.count
                assert state.duration == pytest.approx(other_state.duration, rel=1e-6, abs=1e-3)
            assert node.pstates.freqs == other.pstates.freqs
            for pstate, other_pstate in zip(node.pstates.states, other.pstates.states):
                assert pstate.duration == pytest.approx(other_pstate.duration, rel=1e-6, abs=1e-3)

    @pytest.mark.parametrize("seed", [5, 8])
    def test_composite_depth_bound(self, sample_cstate_info, seed):
        topology = _quad(sample_cstate_info)
        analyzer = Analyzer(topology)

        for event in _random_events(seed):
            analyzer.process(event)
            for cluster in topology.clusters:
                for core in cluster.cores:
                    assert core.cstates.current_cstate <= min(
                        cpu.cstates.current_cstate for cpu in core.cpus)
                assert cluster.cstates.current_cstate <= min(
                    core.cstates.current_cstate for core in cluster.cores)

    @pytest.mark.parametrize("seed", [2, 9])
    def test_slot_tables_stay_sorted(self, sample_cstate_info, seed):
        topology = _quad(sample_cstate_info)
        analyzer = Analyzer(topology, AnalysisConfig(composite_frequency=CompositeFrequency.MAX))

        for event in _random_events(seed):
            analyzer.process(event)
            for node in _all_nodes(topology):
                assert node.pstates.freqs == sorted(set(node.pstates.freqs))


@pytest.mark.unit
class TestAnalyzer:
    """Test cases for event dispatch and error recovery."""

    def test_unknown_cpu_is_dropped(self, single_cpu_topology):
        analyzer = Analyzer(single_cpu_topology)

        assert analyzer.process(TraceEvent.idle_enter(0.0, 7, 0)) is False
        assert analyzer.process(TraceEvent.idle_enter(0.1, 7, 0)) is False
        assert analyzer.process(TraceEvent.idle_enter(0.2, 0, 0)) is True

        assert analyzer.dropped_count == 2
        assert analyzer.event_count == 1
        assert analyzer.begin_time == 0.2

    def test_unsupported_depth_is_dropped(self, single_cpu_topology):
        analyzer = Analyzer(single_cpu_topology)

        assert analyzer.process(TraceEvent.idle_enter(0.0, 0, 16)) is False
        assert single_cpu_topology.get_cpu(0).cstates.current_cstate == -1

    def test_invalid_frequency_is_dropped(self, single_cpu_topology):
        analyzer = Analyzer(single_cpu_topology)

        assert analyzer.process(TraceEvent.freq_change(0.0, 0, 0)) is False
        assert single_cpu_topology.get_cpu(0).pstates.states == []

    def test_wakeup_does_not_touch_groups(self, single_cpu_topology):
        analyzer = Analyzer(single_cpu_topology)
        analyzer.process(TraceEvent.idle_enter(0.0, 0, 0))
        analyzer.process(TraceEvent.idle_exit(0.002, 0))
        analyzer.process(TraceEvent.wakeup(0.002, 0, 42, "eth0"))

        cpu = single_cpu_topology.get_cpu(0)
        assert cpu.wakeups.get(42, "eth0").count == 1
        assert analyzer.event_count == 3

    def test_idle_stops_frequency_dwell(self, single_cpu_topology):
        analyze(single_cpu_topology, [
            TraceEvent.freq_change(0.0, 0, 1_000_000_000),
            TraceEvent.idle_enter(1.0, 0, 0),
            TraceEvent.idle_exit(3.0, 0),
            TraceEvent.freq_change(4.0, 0, 2_000_000_000),
        ])

        _, core, cpu = single_cpu_topology.lookup(0)
        slot = cpu.pstates.states[cpu.pstates.find(1_000_000_000)]
        assert slot.count == 2
        assert slot.duration == pytest.approx(2_000_000.0)
        core_slot = core.pstates.states[core.pstates.find(1_000_000_000)]
        assert core_slot.duration == pytest.approx(2_000_000.0)

    def test_duration_and_finish(self, single_cpu_topology, caplog):
        analyzer = Analyzer(single_cpu_topology)
        with caplog.at_level("INFO"):
            analyzer.run([
                TraceEvent.idle_enter(2.0, 0, 0),
                TraceEvent.idle_exit(2.5, 0),
            ])

        assert analyzer.duration == pytest.approx(0.5)
        assert "Log is 0.500000 secs long with 2 events" in caplog.text

    def test_process_after_finish_raises(self, single_cpu_topology):
        analyzer = Analyzer(single_cpu_topology)
        analyzer.finish()

        with pytest.raises(RuntimeError):
            analyzer.process(TraceEvent.idle_exit(0.0, 0))

    def test_finish_is_idempotent(self, single_cpu_topology):
        analyzer = Analyzer(single_cpu_topology)
        assert analyzer.finish() is analyzer.finish()

    def test_analyze_merges_baseline(self, sample_cstate_info):
        current = Topology.from_entries([TopologyEntry(0, 0, 0)], {0: sample_cstate_info})
        baseline = Topology.from_entries([TopologyEntry(0, 0, 0)], {0: sample_cstate_info})
        analyze(baseline, [TraceEvent.freq_change(0.0, 0, 2_000_000_000)])

        analyze(current, [TraceEvent.freq_change(0.0, 0, 1_000_000_000)], baseline)

        assert current.get_cpu(0).pstates.freqs == [1_000_000_000, 2_000_000_000]
        assert baseline.get_cpu(0).pstates.freqs == [1_000_000_000, 2_000_000_000]

    def test_unnamed_states_still_recorded(self):
        topology = Topology.from_entries([TopologyEntry(0, 0, 0)], {0: CStateInfo()})
        analyze(topology, [TraceEvent.idle_enter(0.0, 0, 3), TraceEvent.idle_exit(0.01, 0)])

        assert topology.get_cpu(0).cstates.states[3].count == 1
