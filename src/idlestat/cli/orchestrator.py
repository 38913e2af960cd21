"""
Analysis runner for CLI integration.

This module ties trace loading, replay, baseline merging, report rendering
and statistics export together for one invocation of the command.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Optional

from ..analysis import Analyzer, merge_pstates
from ..models.config import AppConfig
from ..reports import get_report, render
from ..reports.base import Report
from ..storage import StatsExporter
from ..topology import Topology
from ..traces import load_trace
from ..validation import ErrorSeverity, handle_file_error

logger = logging.getLogger(__name__)


class AnalysisRunner:
    """
    Runs one analysis from trace file to report.

    The current trace and the optional baseline trace are analysed with the
    same settings; the baseline only contributes frequency rows and
    comparison columns.
    """

    def __init__(
        self,
        app_config: AppConfig,
        trace_path: Path,
        baseline_path: Optional[Path] = None,
        output_path: Optional[Path] = None,
        export_dir: Optional[Path] = None,
    ):
        """
        Args:
            app_config: Effective configuration, CLI overrides applied
            trace_path: Trace to analyse
            baseline_path: Trace of an earlier run to compare against
            output_path: File receiving the report, stdout if None
            export_dir: Directory receiving the statistics tables, if any
        """
        self.app_config = app_config
        self.trace_path = Path(trace_path)
        self.baseline_path = Path(baseline_path) if baseline_path else None
        self.output_path = Path(output_path) if output_path else None
        self.export_dir = Path(export_dir) if export_dir else None

        self.topology: Optional[Topology] = None
        self.baseline: Optional[Topology] = None
        self.duration = 0.0
        self.event_count = 0

    def _analyse(self, path: Path) -> Analyzer:
        trace = load_trace(path, self.app_config.trace)
        logger.info(f"{path}: {trace.nrcpus} CPUs, {trace.format_name} format")
        analyzer = Analyzer(trace.topology, self.app_config.analysis)
        analyzer.run(trace.events)
        return analyzer

    def create_report(self, stream=None) -> Report:
        """
        Instantiate the configured report and check it can be produced.

        Raises:
            ValidationError: If the report needs a baseline that was not given,
                or the output cannot hold it
        """
        report = get_report(self.app_config.report.format, stream)
        report.check_options(self.baseline_path is not None)
        report.check_output(self.output_path is not None)
        return report

    def analyse(self) -> Topology:
        """
        Analyse the trace, and the baseline when one was given.

        Raises:
            TraceFormatError: If a trace cannot be decoded
            MalformedTopologyError: If a trace describes an invalid topology
            InconsistentBaseline: If the baseline covers different CPUs
        """
        analyzer = self._analyse(self.trace_path)
        self.topology = analyzer.topology
        self.duration = analyzer.duration
        self.event_count = analyzer.event_count

        if self.baseline_path is not None:
            self.baseline = self._analyse(self.baseline_path).topology
            merge_pstates(self.topology, self.baseline)
        return self.topology

    def write_report(self, report: Report, display: Iterable[str]) -> None:
        if self.output_path is not None:
            report.open_report_file(self.output_path)
        try:
            render(report, self.topology, display, self.baseline)
        finally:
            report.close_report_file()
        if self.output_path is not None:
            logger.info(f"Report written to {self.output_path}")

    def export(self) -> None:
        summary = {
            "trace": str(self.trace_path),
            "baseline": str(self.baseline_path) if self.baseline_path else None,
            "duration": self.duration,
            "events": self.event_count,
        }
        exporter = StatsExporter(self.export_dir, self.app_config.storage)
        try:
            exporter.export(self.topology, summary)
        except OSError as e:
            handle_file_error(e, f"export to {self.export_dir}",
                              severity=ErrorSeverity.ERROR, reraise=True, logger=logger)

    def run(self) -> bool:
        """
        Run the whole analysis.

        Returns:
            True when the report was produced
        """
        report = self.create_report()
        self.analyse()
        self.write_report(report, self.app_config.report.display)
        if self.export_dir is not None:
            self.export()
        return True


def apply_overrides(app_config: AppConfig, **overrides) -> AppConfig:
    """
    Return a copy of ``app_config`` with the non-None CLI values applied.

    Recognised keys: report_format, display, composite_frequency, verbose.
    """
    analysis = app_config.analysis
    report = app_config.report
    if overrides.get("composite_frequency") is not None:
        analysis = replace(analysis, composite_frequency=overrides["composite_frequency"])
    if overrides.get("verbose"):
        analysis = replace(analysis, verbose=max(analysis.verbose, overrides["verbose"]))
    if overrides.get("report_format") is not None:
        report = replace(report, format=overrides["report_format"])
    if overrides.get("display"):
        report = replace(report, display=list(overrides["display"]))
    return replace(app_config, analysis=analysis, report=report)
