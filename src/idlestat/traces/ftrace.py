"""
Raw ftrace text output (the ``trace`` file of tracefs).

The CPU count comes from the ``#P:N`` annotation of the comment header.
Topology and idle states are not recorded, so they are read from the host.
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

MAGIC = "# tracer"

_NRCPUS = re.compile(r"#P:(\d+)")


class FtraceFormat(TraceFormat):
    """Plain ftrace dumps."""

    name = "ftrace"

    def check_magic(self, first_line: str) -> bool:
        return first_line.startswith(MAGIC)

    def load(self, path: Union[str, Path],
             config: Optional[TraceConfig] = None) -> LoadedTrace:
        config = config or TraceConfig()
        lines = read_header_lines(path)
        if not lines:
            raise TraceFormatError(f"Error or EOF while reading {path}")

        nrcpus = 0
        for line in lines:
            if not line.startswith("#"):
                break
            match = _NRCPUS.search(line)
            if match:
                nrcpus = int(match.group(1))
        if nrcpus == 0:
            raise TraceFormatError(f"Cannot load trace file {path} (nrcpus == 0)")

        topology = host_topology(nrcpus, config)
        logger.debug(f"Loaded ftrace header of {path}: {nrcpus} CPUs")
        return LoadedTrace(
            path=Path(path),
            format_name=self.name,
            nrcpus=nrcpus,
            topology=topology,
            events=iter_records(path, len(lines), RecordParser(has_flags=True)),
        )
