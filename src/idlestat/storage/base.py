"""
Abstract base class for statistics storage backends.

A backend persists the tables produced by an analysis run (C-state, P-state
and wake-up rows). Run metadata always goes to a JSON document next to them,
whatever the table format.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional
import polars as pl

logger = logging.getLogger(__name__)


class DataStorage(ABC):
    """Abstract base class for data storage implementations."""

    # File extension for DataFrame files, without the dot.
    extension: str = ""

    @abstractmethod
    def _write_frame(self, df: pl.DataFrame, path: Path) -> None:
        pass

    @abstractmethod
    def _read_frame(self, path: Path, columns: Optional[List[str]]) -> pl.DataFrame:
        pass

    def save_dataframe(self, df: pl.DataFrame, path: str) -> None:
        """
        Write one statistics table, creating parent directories.

        Args:
            df: Table to write
            path: Destination file
        """
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            self._write_frame(df, target)
        except (OSError, pl.exceptions.PolarsError) as e:
            logger.error(f"Failed to write {df.height} rows to {target}: {e}")
            raise
        logger.debug(f"Wrote {df.height} rows to {target}")

    def load_dataframe(
        self, path: str, columns: Optional[List[str]] = None
    ) -> pl.DataFrame:
        """
        Read a table written by ``save_dataframe``.

        Args:
            path: File to read
            columns: Restrict the result to these columns

        Returns:
            The table, in the order it was written
        """
        df = self._read_frame(Path(path), columns)
        logger.debug(f"Read {df.height} rows from {path}")
        return df

    def save_dict(self, data: Dict[str, Any], path: str) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        logger.debug(f"Wrote {len(data)} summary keys to {target}")

    def load_dict(self, path: str) -> Dict[str, Any]:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
