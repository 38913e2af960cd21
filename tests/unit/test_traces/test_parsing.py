"""
Unit tests for trace record decoding.
"""

import pytest

from idlestat.models.events import EventKind
from idlestat.traces.parsing import RecordParser


@pytest.mark.unit
class TestRecordParser:
    """Test cases for turning text lines into events."""

    def test_idle_enter(self, test_utils):
        event = RecordParser().parse(test_utils.idle_line(12.5, 3, 2))

        assert event.kind is EventKind.IDLE_ENTER
        assert event.cpu == 3
        assert event.depth == 2
        assert event.timestamp == pytest.approx(12.5)

    @pytest.mark.parametrize("state", [4294967295, -1])
    def test_idle_exit(self, test_utils, state):
        event = RecordParser().parse(test_utils.idle_line(1.0, 0, state))

        assert event.kind is EventKind.IDLE_EXIT

    def test_frequency_in_hz(self, test_utils):
        event = RecordParser().parse(test_utils.freq_line(1.0, 1, 1200000))

        assert event.kind is EventKind.FREQ_CHANGE
        assert event.frequency == 1_200_000_000
        assert event.cpu == 1

    def test_irq_uses_record_cpu(self, test_utils):
        event = RecordParser().parse(test_utils.irq_line(1.0, 5, 42, "eth0"))

        assert event.kind is EventKind.WAKEUP
        assert event.cpu == 5
        assert event.irq_id == 42
        assert event.irq_name == "eth0"

    def test_ipi(self, test_utils):
        event = RecordParser().parse(test_utils.ipi_line(1.0, 2, "Function call interrupts"))

        assert event.irq_id == -1
        assert event.irq_name == "Function call interrupts"

    def test_records_without_flags(self, test_utils):
        parser = RecordParser(has_flags=False)
        event = parser.parse(test_utils.idle_line(4.25, 1, 0, flags=False))

        assert event.kind is EventKind.IDLE_ENTER
        assert event.timestamp == pytest.approx(4.25)

    def test_other_events_are_ignored(self):
        parser = RecordParser()
        line = "            bash-1234  [000] ....   10.000000: sched_switch: prev_comm=bash"

        assert parser.parse(line) is None
        assert parser.parse("# tracer: nop") is None
        assert parser.unrecognized == 0

    def test_malformed_known_event_is_counted(self, caplog):
        parser = RecordParser()
        line = "          <idle>-0     [000] d..2   10.000000: cpu_idle: garbage"

        with caplog.at_level("WARNING"):
            assert parser.parse(line) is None

        assert parser.unrecognized == 1
        assert "Unrecognized cpu_idle record" in caplog.text
