"""
Decoding of ftrace-style text records into trace events.

Two record layouts are understood. Raw ftrace output (also embedded in
native idlestat traces) has a flags column between the CPU and the
timestamp; ``trace-cmd report`` output does not:

    <idle>-0     [001] d..2   123.456789: cpu_idle: state=1 cpu_id=1
    <idle>-0     [001]   123.456789: cpu_idle:             state=1 cpu_id=1
"""

import logging
import re
from typing import Optional

from ..models.events import TraceEvent

logger = logging.getLogger(__name__)

# cpu_idle reports idle exit as (u32)-1.
IDLE_EXIT_STATE = 4294967295

KHZ_TO_HZ = 1000

_RECORD_WITH_FLAGS = re.compile(
    r"(?:^|\s)\[(?P<cpu>\d+)\]\s+\S+\s+(?P<time>\d+\.\d+):\s+(?P<event>\w+):(?P<body>.*)$")
_RECORD_NO_FLAGS = re.compile(
    r"(?:^|\s)\[(?P<cpu>\d+)\]\s+(?P<time>\d+\.\d+):\s+(?P<event>\w+):(?P<body>.*)$")

_STATE_CPU = re.compile(r"state=(?P<state>-?\d+)\s+cpu_id=(?P<cpu>\d+)")
_IRQ = re.compile(r"irq=(?P<irq>\d+)\s+name=(?P<name>\S+)")
_IPI = re.compile(r"\((?P<reason>[^)]*)\)")

# Event names this module decodes; other records are ignored silently.
KNOWN_EVENTS = ("cpu_idle", "cpu_frequency", "irq_handler_entry", "ipi_entry")


class RecordParser:
    """
    Turns one trace text line into a ``TraceEvent``.

    Lines that are not records of a known event return None. Records of a
    known event whose payload cannot be decoded are counted and logged.
    """

    def __init__(self, has_flags: bool = True):
        self._record = _RECORD_WITH_FLAGS if has_flags else _RECORD_NO_FLAGS
        self.unrecognized = 0

    def _warn(self, event: str, line: str) -> None:
        self.unrecognized += 1
        logger.warning(f"Unrecognized {event} record skipped: {line.strip()}")

    def parse(self, line: str) -> Optional[TraceEvent]:
        if not any(name in line for name in KNOWN_EVENTS):
            return None

        match = self._record.search(line)
        if match is None:
            for name in KNOWN_EVENTS:
                if f"{name}:" in line:
                    self._warn(name, line)
                    break
            return None

        event = match.group("event")
        body = match.group("body")
        timestamp = float(match.group("time"))

        if event == "cpu_idle":
            fields = _STATE_CPU.search(body)
            if fields is None:
                self._warn(event, line)
                return None
            state = int(fields.group("state"))
            cpu = int(fields.group("cpu"))
            if state in (IDLE_EXIT_STATE, -1):
                return TraceEvent.idle_exit(timestamp, cpu)
            return TraceEvent.idle_enter(timestamp, cpu, state)

        if event == "cpu_frequency":
            fields = _STATE_CPU.search(body)
            if fields is None:
                self._warn(event, line)
                return None
            freq_hz = int(fields.group("state")) * KHZ_TO_HZ
            return TraceEvent.freq_change(timestamp, int(fields.group("cpu")), freq_hz)

        if event == "irq_handler_entry":
            fields = _IRQ.search(body)
            if fields is None:
                self._warn(event, line)
                return None
            return TraceEvent.wakeup(timestamp, int(match.group("cpu")),
                                     int(fields.group("irq")), fields.group("name"))

        if event == "ipi_entry":
            fields = _IPI.search(body)
            if fields is None:
                self._warn(event, line)
                return None
            return TraceEvent.wakeup(timestamp, int(match.group("cpu")), -1,
                                     fields.group("reason").strip())

        return None
