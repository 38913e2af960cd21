"""
Abstract base class for report renderers.

A report is a set of hooks called by the topology traversal in
``idlestat.reports.traversal``: one header/footer pair per table, one header
per entity that has rows, one call per row and an end-of-entity call.
"""

import logging
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, TextIO, Union

from ..models.states import CState, PState, WakeupIrq
from ..validation import ValidationError

logger = logging.getLogger(__name__)


class Report(ABC):
    """
    Abstract base class for report renderers.

    Output goes to ``self.stream``, stdout unless a report file is opened.
    """

    # Registry key.
    name: str = ""
    # Whether the report is meaningless without a baseline trace.
    requires_baseline: bool = False

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream: TextIO = stream or sys.stdout
        self._owns_stream = False

    def write(self, text: str = "") -> None:
        self.stream.write(text)

    def writeln(self, text: str = "") -> None:
        self.stream.write(text + "\n")

    def check_options(self, has_baseline: bool) -> None:
        """
        Raises:
            ValidationError: If the report cannot be produced with these inputs
        """
        if self.requires_baseline and not has_baseline:
            raise ValidationError(f"{self.name} report requires a baseline trace",
                                  field_name="baseline")

    def check_output(self, to_file: bool) -> None:
        """Hook to validate the output destination before rendering."""

    def open_report_file(self, path: Union[str, Path]) -> None:
        self.close_report_file()
        self.stream = open(path, "w", encoding="utf-8")
        self._owns_stream = True
        logger.debug(f"Writing {self.name} report to {path}")

    def close_report_file(self) -> None:
        if self._owns_stream:
            self.stream.close()
            self.stream = sys.stdout
            self._owns_stream = False

    # C-state table
    @abstractmethod
    def cstate_table_header(self) -> None:
        pass

    @abstractmethod
    def cstate_table_footer(self) -> None:
        pass

    @abstractmethod
    def cstate_cpu_header(self, label: str) -> None:
        pass

    @abstractmethod
    def cstate_single_state(self, state: CState, baseline: Optional[CState] = None) -> None:
        """Render one C-state row; ``baseline`` is the matching baseline row."""
        pass

    def cstate_end_cpu(self) -> None:
        pass

    # P-state table
    @abstractmethod
    def pstate_table_header(self) -> None:
        pass

    @abstractmethod
    def pstate_table_footer(self) -> None:
        pass

    @abstractmethod
    def pstate_cpu_header(self, label: str) -> None:
        pass

    @abstractmethod
    def pstate_single_freq(self, pstate: PState, baseline: Optional[PState] = None) -> None:
        pass

    def pstate_end_cpu(self) -> None:
        pass

    # Wake-up table
    @abstractmethod
    def wakeup_table_header(self) -> None:
        pass

    @abstractmethod
    def wakeup_table_footer(self) -> None:
        pass

    @abstractmethod
    def wakeup_cpu_header(self, label: str) -> None:
        pass

    @abstractmethod
    def wakeup_single_irq(self, irq: WakeupIrq) -> None:
        pass

    def wakeup_end_cpu(self) -> None:
        pass
