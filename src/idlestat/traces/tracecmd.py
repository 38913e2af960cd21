"""
Output of ``trace-cmd report``.

The second line carries ``cpus=N``; records have no flags column. Topology
and idle states are read from the host.
"""

import logging
import re
from pathlib import Path
from typing import Optional, Union

from ..models.config import TraceConfig
from ..validation import TraceFormatError
from .base import LoadedTrace, TraceFormat, host_topology, iter_records, read_header_lines
from .parsing import RecordParser

logger = logging.getLogger(__name__)

MAGIC = "version = "

_CPUS = re.compile(r"^cpus=(\d+)")


class TraceCmdReportFormat(TraceFormat):
    """Text reports produced by trace-cmd."""

    name = "trace-cmd report"

    def check_magic(self, first_line: str) -> bool:
        return first_line.startswith(MAGIC)

    def load(self, path: Union[str, Path],
             config: Optional[TraceConfig] = None) -> LoadedTrace:
        config = config or TraceConfig()
        lines = read_header_lines(path)
        if len(lines) < 2:
            raise TraceFormatError(f"Error or EOF while reading {path}")

        match = _CPUS.match(lines[1])
        nrcpus = int(match.group(1)) if match else 0
        if nrcpus == 0:
            raise TraceFormatError(f"Cannot load trace file {path} (nrcpus == 0)")

        topology = host_topology(nrcpus, config)
        logger.debug(f"Loaded trace-cmd report header of {path}: {nrcpus} CPUs")
        return LoadedTrace(
            path=Path(path),
            format_name=self.name,
            nrcpus=nrcpus,
            topology=topology,
            events=iter_records(path, len(lines), RecordParser(has_flags=False)),
        )
