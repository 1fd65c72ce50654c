from __future__ import annotations

"""
Logging Configuration Models.

Defines the configuration dataclass used to initialize the logging subsystem
for build runs, and the mapping of textual severities to logging constants.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


@dataclass(frozen=True)
class LoggingConfig:
    """
    Immutable settings for the logging subsystem initialization.

    Attributes:
        level: Minimum severity level to capture.
        console: Flag to enable stderr stream output.
        log_file: Optional path for a persistent build log.
        max_bytes: Maximum size per log segment before rotation.
        backup_count: Number of historical log segments to preserve.
        console_fmt: Structural format for terminal output.
        file_fmt: Structural format for file entries.
        datefmt: Chronological format for timestamp generation.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 1024 * 1024
    backup_count: int = 3

    console_fmt: str = "%(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
