"""
Abstract base class for trace file formats.

Each format knows how to recognise its files from the first line and how to
turn them into a topology plus a lazily decoded event stream.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Union

from ..models.config import TraceConfig
from ..models.events import TraceEvent
from ..topology.model import Topology
from ..topology.sysfs import flat_topology, read_sysfs_cstates, read_sysfs_topology
from ..validation import TraceFormatError
from .parsing import RecordParser

logger = logging.getLogger(__name__)


@dataclass
class LoadedTrace:
    """A trace file ready for replay."""

    path: Path
    # Registered name of the format that decoded the file.
    format_name: str
    nrcpus: int
    topology: Topology
    # Decoded lazily; can only be consumed once.
    events: Iterator[TraceEvent]


class TraceFormat(ABC):
    """
    Abstract base class for trace file decoders.
    """

    # Registry key and human-readable name.
    name: str = ""

    @abstractmethod
    def check_magic(self, first_line: str) -> bool:
        """Return True if a file starting with ``first_line`` is in this format."""
        pass

    @abstractmethod
    def load(self, path: Union[str, Path],
             config: Optional[TraceConfig] = None) -> LoadedTrace:
        """
        Read the header of ``path`` and prepare its event stream.

        Raises:
            TraceFormatError: If the header cannot be decoded
        """
        pass


def read_header_lines(path: Union[str, Path]) -> List[str]:
    """
    Read a whole trace header into memory.

    Only lines up to the first record are kept; the rest is streamed later.

    Raises:
        TraceFormatError: If the file cannot be read
    """
    lines: List[str] = []
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            for line in f:
                if "]" in line and ": " in line and not line.startswith("#"):
                    break
                lines.append(line.rstrip("\n"))
    except OSError as e:
        raise TraceFormatError(f"Cannot read trace file {path}: {e}") from e
    return lines


def iter_records(path: Union[str, Path], start_line: int,
                 parser: RecordParser) -> Iterator[TraceEvent]:
    """
    Yield decoded events from line ``start_line`` (0-based) to the end.
    """
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for lineno, line in enumerate(f):
            if lineno < start_line:
                continue
            event = parser.parse(line)
            if event is not None:
                yield event
    if parser.unrecognized:
        logger.warning(f"{parser.unrecognized} unrecognized records in {path}; "
                       f"the result of analysis might be wrong")


def host_topology(nrcpus: int, config: TraceConfig) -> Topology:
    """
    Describe the traced machine with the topology of the host.

    CPUs beyond ``nrcpus`` are ignored. When the host exposes no topology,
    every CPU becomes its own core in cluster A.
    """
    entries = [e for e in read_sysfs_topology(config.sysfs_root) if e.cpu_id < nrcpus]
    if not entries:
        logger.info(f"No CPU topology under {config.sysfs_root}, assuming {nrcpus} independent CPUs")
        entries = flat_topology(nrcpus)
    cstates = read_sysfs_cstates(config.sysfs_root, [e.cpu_id for e in entries])
    return Topology.from_entries(entries, cstates)
