"""
Reading config.toml into plain section tables.

Each top-level table of the file configures one part of the tool; the
validators turn those tables into dataclasses.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict

from ..validation import ErrorSeverity, ValidationError, handle_config_error

logger = logging.getLogger(__name__)

# Top-level tables understood by the validators.
CONFIG_SECTIONS = ("analysis", "report", "trace", "storage")


def load_toml_file(file_path: Path, description: str = "config.toml") -> Dict[str, Any]:
    """
    Parse one TOML document.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    if not file_path.exists():
        raise FileNotFoundError(f"{description} not found: {file_path}")

    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {description} at {file_path}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise


def load_main_config(config_path: Path) -> Dict[str, Dict[str, Any]]:
    """
    Load config.toml and return its known sections.

    Unknown top-level keys are logged and dropped, so a file written for a
    newer release still loads.

    Returns:
        Mapping of section name to its table, only for sections present

    Raises:
        ValidationError: If a known section is not a table
    """
    data = load_toml_file(config_path)
    sections: Dict[str, Dict[str, Any]] = {}
    for key, value in data.items():
        if key not in CONFIG_SECTIONS:
            logger.warning(f"Ignoring unknown section [{key}] in {config_path}")
            continue
        if not isinstance(value, dict):
            raise ValidationError(
                f"[{key}] must be a table, got {type(value).__name__}",
                field_name=key,
                value=value
            )
        sections[key] = value
    logger.debug(f"Read sections {sorted(sections)} from {config_path}")
    return sections
