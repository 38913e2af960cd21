"""
Default tables with a delta row against a baseline trace under every row.
"""

from typing import Optional

from ..models.states import CState, IntervalStats, PState
from .default import DefaultReport
from .formatting import format_int_delta, format_time_delta


def _delta_columns(current: IntervalStats, baseline: IntervalStats) -> str:
    return " | ".join([
        format_time_delta(current.reported_min_time - baseline.reported_min_time),
        format_time_delta(current.max_time - baseline.max_time),
        format_time_delta(current.avg_time - baseline.avg_time),
        format_time_delta(current.duration - baseline.duration),
    ])


class ComparisonReport(DefaultReport):
    """
    Each row is followed by the difference between the trace and the
    baseline. Rows present only in the baseline are shown with zero values.
    """

    name = "comparison"
    requires_baseline = True

    def cstate_single_state(self, state: CState, baseline: Optional[CState] = None) -> None:
        base = baseline if baseline is not None else CState(name=state.name)
        super().cstate_single_state(state)
        self.writeln(
            f"|          | {_delta_columns(state, base)} |"
            f" {format_int_delta(state.count - base.count)} |"
            f" {format_int_delta(state.early_wakings - base.early_wakings)} |"
            f" {format_int_delta(state.late_wakings - base.late_wakings)} |")

    def pstate_single_freq(self, pstate: PState, baseline: Optional[PState] = None) -> None:
        base = baseline if baseline is not None else PState(freq=pstate.freq)
        super().pstate_single_freq(pstate)
        self.writeln(
            f"|          | {_delta_columns(pstate, base)} |"
            f" {format_int_delta(pstate.count - base.count)} |")
