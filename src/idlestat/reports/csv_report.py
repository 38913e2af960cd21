"""
Comma-separated tables for spreadsheets and scripts.

Each entity label goes in its own column (cluster, core or cpu) on a line
of its own; the rows that follow leave those three columns empty.
"""

import csv
from typing import List, Optional

from ..models.states import CState, PState, WakeupIrq
from .base import Report


def _label_row(label: str) -> List[str]:
    if label.startswith("cluster"):
        return [label]
    if label.startswith("core"):
        return ["", label]
    return ["", "", label]


class CsvReport(Report):
    """CSV rendering of the C-state, P-state and wake-up tables."""

    name = "csv"

    def _row(self, values: List) -> None:
        csv.writer(self.stream, lineterminator="\n").writerow(values)

    def _stats(self, stats) -> List[str]:
        return [f"{stats.reported_min_time:f}", f"{stats.max_time:f}",
                f"{stats.avg_time:f}", f"{stats.duration:f}"]

    def cstate_table_header(self) -> None:
        self.writeln("C-State Table")
        self._row(["cluster", "core", "cpu", "C-state", "min (us)", "max (us)",
                   "avg (us)", "total (us)", "hits", "over", "under"])

    def cstate_table_footer(self) -> None:
        self.writeln()
        self.writeln()

    def cstate_cpu_header(self, label: str) -> None:
        self._row(_label_row(label))

    def cstate_single_state(self, state: CState, baseline: Optional[CState] = None) -> None:
        self._row(["", "", "", state.name or ""] + self._stats(state)
                  + [state.count, state.early_wakings, state.late_wakings])

    def pstate_table_header(self) -> None:
        self.writeln("P-State Table")
        self._row(["", "", "", "P-state (Hz)", "min (us)", "max (us)",
                   "avg (us)", "total (us)", "hits"])

    def pstate_table_footer(self) -> None:
        self.writeln()
        self.writeln()

    def pstate_cpu_header(self, label: str) -> None:
        self._row(_label_row(label))

    def pstate_single_freq(self, pstate: PState, baseline: Optional[PState] = None) -> None:
        self._row(["", "", "", pstate.freq] + self._stats(pstate) + [pstate.count])

    def wakeup_table_header(self) -> None:
        self.writeln()
        self.writeln("Wakeup Table")
        self._row(["cluster", "core", "cpu", "IRQ", "Name", "Count", "early", "late"])

    def wakeup_table_footer(self) -> None:
        self.writeln()
        self.writeln()

    def wakeup_cpu_header(self, label: str) -> None:
        self._row(_label_row(label))

    def wakeup_single_irq(self, irq: WakeupIrq) -> None:
        irq_column = "IPI" if irq.is_ipi else irq.irq_id
        self._row(["", "", "", irq_column, irq.name, irq.count,
                   irq.early_triggers, irq.late_triggers])
