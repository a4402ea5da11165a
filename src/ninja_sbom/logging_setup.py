# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Structured logging for ninja_sbom runs.

Each run writes one JSON object per record to a dated file under the
configured log directory. Callers attach machine-readable fields with
`extra={"extra_fields": {...}}`; the service uses this for ingestion
summaries so a run's report counts can be read back from the log file.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ninja_sbom.config import Config

LOG_FILE_PREFIX = "ninja_sbom"
CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"


class StructuredFormatter(logging.Formatter):
    """Render a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "location": f"{record.module}:{record.lineno}",
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        fields = getattr(record, "extra_fields", None)
        if fields:
            entry.update(fields)

        # Paths and enums in extra_fields are written via str()
        return json.dumps(entry, default=str)


def _replace_handlers(root_logger: logging.Logger) -> None:
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()


def setup_logging(
    log_dir: Path,
    log_level: int = logging.INFO,
    console_output: bool = True,
) -> Path:
    """Route all logging to a JSON file and optionally stderr.

    Existing root handlers are removed so repeated runs in one process do
    not duplicate output.

    Args:
        log_dir: Directory for the log file; created if missing.
        log_level: Level applied to the root logger and both handlers.
        console_output: Also write short human-readable lines to stderr.
            stdout is left free for report output.

    Returns:
        Path of the JSON log file.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{LOG_FILE_PREFIX}_{datetime.now(timezone.utc):%Y%m%d}.log"

    root_logger = logging.getLogger()
    _replace_handlers(root_logger)
    root_logger.setLevel(log_level)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(log_level)
    file_handler.setFormatter(StructuredFormatter())
    root_logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        root_logger.addHandler(console_handler)

    logging.getLogger(__name__).debug(
        f"Logging to {log_file}",
        extra={"extra_fields": {"log_level": logging.getLevelName(log_level)}},
    )
    return log_file


def configure_logging(
    config: Config,
    console_output: bool = True,
    base_dir: Optional[Path] = None,
) -> Path:
    """Apply the logging settings of a Config.

    Args:
        config: Supplies log_level and log_dir.
        console_output: See setup_logging().
        base_dir: Directory a relative log_dir resolves against (default: cwd).

    Returns:
        Path of the JSON log file.
    """
    log_dir = config.log_dir
    if not log_dir.is_absolute():
        log_dir = (base_dir or Path.cwd()) / log_dir
    return setup_logging(log_dir, log_level=config.log_level, console_output=console_output)
