from __future__ import annotations

"""
Logging Settings.

The CLI derives one of these from the validated application config
(`log_level`, `save_log`) and hands it to `configure_logging`.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging setup for one process.

    Attributes:
        level: Level name for the root logger and every sink.
        console: Write records to stderr.
        log_file: Rotating log file; None disables file output.
        max_bytes: Size at which the log file rolls over.
        backup_count: Rolled-over files kept next to the active one.
    """
    level: str = "WARNING"
    console: bool = True
    log_file: Optional[str] = None
    max_bytes: int = 1024 * 1024
    backup_count: int = 2
