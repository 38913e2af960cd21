"""
Boxed text tables for terminals.
"""

import shutil
from typing import Optional

from ..models.states import CState, PState, WakeupIrq
from ..validation import ValidationError
from .base import Report
from .formatting import format_factored_freq, format_factored_time

CSTATE_WIDTH = 80
PSTATE_WIDTH = 64
WAKEUP_WIDTH = 55


class DefaultReport(Report):
    """Fixed-width tables with one section per cluster, core and CPU."""

    name = "default"

    def check_output(self, to_file: bool) -> None:
        """
        Raises:
            ValidationError: If printing to a terminal narrower than the tables
        """
        if to_file or not self.stream.isatty():
            return
        columns = shutil.get_terminal_size().columns
        if columns < CSTATE_WIDTH:
            raise ValidationError(
                f"The terminal must be at least {CSTATE_WIDTH} columns wide, got {columns}",
                field_name="terminal", value=columns)

    def _rule(self, width: int) -> None:
        self.writeln("-" * width)

    def _cpu_header(self, label: str, width: int) -> None:
        self._rule(width)
        if label.startswith("cluster"):
            self.writeln(f"| {label:<{width - 4}} |")
        elif label.startswith("core"):
            self.writeln(f"|      {label:<{width - 9}} |")
        else:
            self.writeln(f"|             {label:<{width - 16}} |")
        self._rule(width)

    def _time_columns(self, stats) -> str:
        return " | ".join([
            format_factored_time(stats.reported_min_time),
            format_factored_time(stats.max_time),
            format_factored_time(stats.avg_time),
            format_factored_time(stats.duration),
        ])

    def cstate_table_header(self) -> None:
        self._rule(CSTATE_WIDTH)
        self.writeln("| C-state  |   min    |   max    |   avg    |   total  | hits  |  over | under |")

    def cstate_table_footer(self) -> None:
        self._rule(CSTATE_WIDTH)
        self.writeln()

    def cstate_cpu_header(self, label: str) -> None:
        self._cpu_header(label, CSTATE_WIDTH)

    def cstate_single_state(self, state: CState, baseline: Optional[CState] = None) -> None:
        self.writeln(f"| {state.name or '':>8} | {self._time_columns(state)} | "
                     f"{state.count:5d} | {state.early_wakings:5d} | {state.late_wakings:5d} |")

    def pstate_table_header(self) -> None:
        self._rule(PSTATE_WIDTH)
        self.writeln("| P-state  |   min    |   max    |   avg    |   total  | hits  |")

    def pstate_table_footer(self) -> None:
        self._rule(PSTATE_WIDTH)
        self.writeln()

    def pstate_cpu_header(self, label: str) -> None:
        self._cpu_header(label, PSTATE_WIDTH)

    def pstate_single_freq(self, pstate: PState, baseline: Optional[PState] = None) -> None:
        self.writeln(f"| {format_factored_freq(pstate.freq)} | {self._time_columns(pstate)} | "
                     f"{pstate.count:5d} |")

    def wakeup_table_header(self) -> None:
        self._rule(WAKEUP_WIDTH)
        self.writeln("| IRQ |       Name      |  Count  |  early  |  late   |")

    def wakeup_table_footer(self) -> None:
        self._rule(WAKEUP_WIDTH)
        self.writeln()

    def wakeup_cpu_header(self, label: str) -> None:
        self._cpu_header(label, WAKEUP_WIDTH)

    def wakeup_single_irq(self, irq: WakeupIrq) -> None:
        irq_column = "IPI" if irq.is_ipi else f"{irq.irq_id:<3d}"
        self.writeln(f"| {irq_column} | {irq.name[:15]:<15} | {irq.count:7d} | "
                     f"{irq.early_triggers:7d} | {irq.late_triggers:7d} |")
