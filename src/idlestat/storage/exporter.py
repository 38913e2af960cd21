"""
Export of analysed statistics as tables.

The finished topology is flattened into three Polars DataFrames (idle
states, frequencies and wake-up sources), one row per non-empty entry, and
written with the configured storage backend next to a JSON run summary.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import polars as pl

from ..models.config import StorageConfig
from ..topology.model import Node, Topology
from .factory import create_storage

logger = logging.getLogger(__name__)

_ENTITY_SCHEMA = {
    "entity": pl.Utf8,
    "level": pl.Utf8,
    "cluster": pl.Int64,
    "core": pl.Int64,
    "cpu": pl.Int64,
}

CSTATE_SCHEMA = {
    **_ENTITY_SCHEMA,
    "depth": pl.Int64,
    "name": pl.Utf8,
    "target_residency_us": pl.Int64,
    "count": pl.Int64,
    "min_us": pl.Float64,
    "max_us": pl.Float64,
    "avg_us": pl.Float64,
    "total_us": pl.Float64,
    "early_wakings": pl.Int64,
    "late_wakings": pl.Int64,
}

PSTATE_SCHEMA = {
    **_ENTITY_SCHEMA,
    "freq_hz": pl.Int64,
    "count": pl.Int64,
    "min_us": pl.Float64,
    "max_us": pl.Float64,
    "avg_us": pl.Float64,
    "total_us": pl.Float64,
}

WAKEUP_SCHEMA = {
    **_ENTITY_SCHEMA,
    "irq": pl.Int64,
    "kind": pl.Utf8,
    "name": pl.Utf8,
    "count": pl.Int64,
    "early_triggers": pl.Int64,
    "late_triggers": pl.Int64,
}


def _iter_nodes(topology: Topology) -> Iterator[Tuple[Node, Dict[str, Any]]]:
    for cluster in topology.clusters:
        yield cluster, {"entity": cluster.label, "level": "cluster",
                        "cluster": cluster.id, "core": None, "cpu": None}
        for core in cluster.cores:
            yield core, {"entity": core.label, "level": "core",
                         "cluster": cluster.id, "core": core.id, "cpu": None}
            for cpu in core.cpus:
                yield cpu, {"entity": cpu.label, "level": "cpu",
                            "cluster": cluster.id, "core": core.id, "cpu": cpu.id}


def cstates_frame(topology: Topology) -> pl.DataFrame:
    rows: List[Dict[str, Any]] = []
    for node, entity in _iter_nodes(topology):
        for depth, state in enumerate(node.cstates.states):
            if state.count == 0:
                continue
            rows.append({
                **entity,
                "depth": depth,
                "name": state.name,
                "target_residency_us": state.target_residency,
                "count": state.count,
                "min_us": state.reported_min_time,
                "max_us": state.max_time,
                "avg_us": state.avg_time,
                "total_us": state.duration,
                "early_wakings": state.early_wakings,
                "late_wakings": state.late_wakings,
            })
    return pl.DataFrame(rows, schema=CSTATE_SCHEMA)


def pstates_frame(topology: Topology) -> pl.DataFrame:
    rows: List[Dict[str, Any]] = []
    for node, entity in _iter_nodes(topology):
        for pstate in node.pstates.states:
            if pstate.count == 0:
                continue
            rows.append({
                **entity,
                "freq_hz": pstate.freq,
                "count": pstate.count,
                "min_us": pstate.reported_min_time,
                "max_us": pstate.max_time,
                "avg_us": pstate.avg_time,
                "total_us": pstate.duration,
            })
    return pl.DataFrame(rows, schema=PSTATE_SCHEMA)


def wakeups_frame(topology: Topology) -> pl.DataFrame:
    rows: List[Dict[str, Any]] = []
    for node, entity in _iter_nodes(topology):
        if entity["level"] != "cpu":
            continue
        for irq in node.wakeups:
            rows.append({
                **entity,
                "irq": irq.irq_id,
                "kind": irq.label,
                "name": irq.name,
                "count": irq.count,
                "early_triggers": irq.early_triggers,
                "late_triggers": irq.late_triggers,
            })
    return pl.DataFrame(rows, schema=WAKEUP_SCHEMA)


class StatsExporter:
    """
    Writes the statistics of one analysis run to a directory.
    """

    def __init__(self, output_dir: Union[str, Path],
                 storage_config: Optional[StorageConfig] = None):
        self.output_dir = Path(output_dir)
        config = storage_config or StorageConfig()
        self.storage = create_storage(config.format, config.compression)

    def table_path(self, table: str) -> Path:
        return self.output_dir / f"{table}.{self.storage.extension}"

    def export(self, topology: Topology, summary: Optional[Dict[str, Any]] = None) -> Dict[str, Path]:
        """
        Write the ``cstates``, ``pstates`` and ``wakeups`` tables and
        ``summary.json``.

        Returns:
            Paths of the written files, by table name
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        written: Dict[str, Path] = {}
        frames = {
            "cstates": cstates_frame(topology),
            "pstates": pstates_frame(topology),
            "wakeups": wakeups_frame(topology),
        }
        for table, df in frames.items():
            path = self.table_path(table)
            self.storage.save_dataframe(df, str(path))
            written[table] = path

        summary_path = self.output_dir / "summary.json"
        self.storage.save_dict(dict(summary or {}, nrcpus=topology.nr_cpus), str(summary_path))
        written["summary"] = summary_path

        logger.info(f"Exported statistics to {self.output_dir}")
        return written
