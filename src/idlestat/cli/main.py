"""
Command-line interface for the idlestat trace analyzer.

This module provides the main CLI entry point: it parses arguments, merges
them with the configuration file, and hands the run to AnalysisRunner.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .. import __version__
from ..config import get_config, set_config_path
from ..models.config import DISPLAY_CHOICES, CompositeFrequency
from ..reports import list_reports
from ..traces import list_trace_formats
from ..validation import (
    IdlestatError,
    ValidationError,
    handle_cli_error,
    validate_enum_choice,
    validate_filename,
)
from .orchestrator import AnalysisRunner, apply_overrides

# --- Logging Setup ---
# stdout carries the report, so log records go to stderr.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="idlestat",
        description="Report CPU idle state, frequency and wake-up statistics from a kernel trace.",
    )
    parser.add_argument("-f", "--trace-file", type=str,
                        help="Trace file to analyse (idlestat, ftrace or trace-cmd report format).")
    parser.add_argument("-b", "--baseline-trace", type=str,
                        help="Trace of an earlier run to compare against.")
    parser.add_argument("-r", "--report-format", type=str,
                        help=f"Report format. Available: {list_reports()}")
    parser.add_argument("-o", "--output-file", type=str,
                        help="Write the report to this file instead of stdout.")
    parser.add_argument("-c", "--idle", action="store_true",
                        help="Show the idle state table.")
    parser.add_argument("-p", "--frequency", action="store_true",
                        help="Show the frequency table.")
    parser.add_argument("-w", "--wakeup", action="store_true",
                        help="Show the wake-up table.")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Log discarded intervals and per-event details.")
    parser.add_argument("--config", type=str,
                        help="Path to an alternative config.toml.")
    parser.add_argument("--composite-frequency",
                        choices=[choice.value for choice in CompositeFrequency],
                        help="Report the lowest or highest running frequency for cores and clusters.")
    parser.add_argument("--export", type=str, metavar="DIR",
                        help="Also write the statistics tables to DIR.")
    parser.add_argument("--list-formats", action="store_true",
                        help="List trace and report formats, then exit.")
    parser.add_argument("-V", "--version", action="version",
                        version=f"%(prog)s {__version__}")
    return parser


def _selected_display(args: argparse.Namespace) -> List[str]:
    display = []
    for flag, section in zip((args.idle, args.frequency, args.wakeup), DISPLAY_CHOICES):
        if flag:
            display.append(section)
    return display


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line interface for idlestat.

    Raises:
        SystemExit: On invalid arguments, configuration errors or analysis failures.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.list_formats:
        print("Trace formats: " + ", ".join(list_trace_formats()))
        print("Report formats: " + ", ".join(list_reports()))
        return

    if not args.trace_file:
        parser.error("a trace file is required (-f)")

    # Validate file names before touching the file system
    try:
        trace_path = Path(validate_filename(args.trace_file, field_name="--trace-file"))
        baseline_path = None
        if args.baseline_trace:
            baseline_path = Path(validate_filename(args.baseline_trace, field_name="--baseline-trace"))
        output_path = None
        if args.output_file:
            output_path = Path(validate_filename(args.output_file, field_name="--output-file"))
        export_dir = None
        if args.export:
            export_dir = Path(validate_filename(args.export, field_name="--export"))
        if args.report_format:
            validate_enum_choice(args.report_format, list_reports(), field_name="--report-format")
    except ValidationError as e:
        handle_cli_error(error=e, context="argument validation", exit_code=2, logger=logger)

    # Load application configuration
    if args.config:
        set_config_path(Path(args.config))
    try:
        app_config = get_config()
    except (FileNotFoundError, ValidationError, ValueError) as e:
        handle_cli_error(error=e, context="configuration loading", exit_code=1, logger=logger)

    app_config = apply_overrides(
        app_config,
        report_format=args.report_format,
        display=_selected_display(args),
        composite_frequency=(CompositeFrequency(args.composite_frequency)
                             if args.composite_frequency else None),
        verbose=args.verbose,
    )

    runner = AnalysisRunner(
        app_config,
        trace_path=trace_path,
        baseline_path=baseline_path,
        output_path=output_path,
        export_dir=export_dir,
    )
    try:
        runner.run()
    except (ValidationError, IdlestatError, OSError) as e:
        handle_cli_error(error=e, context="analysis", exit_code=1, logger=logger)


if __name__ == "__main__":
    main_cli()
