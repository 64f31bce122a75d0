from __future__ import annotations

"""
Logging Settings.

The CLI streams the generated artifact on stdout, so diagnostics only
ever go to stderr or to an optional rotating file. ``LoggingConfig.for_cli``
turns the ``--debug`` and ``--log-file`` flags into the settings consumed
by ``configure_logging``.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

QUIET_LEVEL = "WARNING"
VERBOSE_LEVEL = "DEBUG"

_LEVEL_BY_NAME: Dict[str, int] = {
    name: logging.getLevelName(name)
    for name in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
}
_LEVEL_BY_NAME["WARN"] = logging.WARNING


def parse_level(level: Optional[str]) -> int:
    """Numeric level for a level name. Empty or unknown names map to WARNING."""
    return _LEVEL_BY_NAME.get(str(level or "").strip().upper(), logging.WARNING)


@dataclass(frozen=True)
class LoggingConfig:
    """
    Where and how much a cntxtify run logs.

    Attributes:
        level: Level name; WARNING keeps a piped run silent on success.
        console: Mirror records on stderr.
        log_file: Rotating log file path, if any.
        max_bytes: Log file size that triggers a rollover.
        backup_count: Rolled-over log files kept next to the active one.
        console_fmt: stderr line format.
        file_fmt: Log file line format (reader pool threads are named).
        datefmt: Timestamp format of the log file.
    """
    level: str = QUIET_LEVEL
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 512 * 1024
    backup_count: int = 3

    console_fmt: str = "cntxtify: %(levelname)s: %(message)s"
    file_fmt: str = "%(asctime)s %(levelname)-8s [%(threadName)s] %(name)s: %(message)s"
    datefmt: str = "%Y-%m-%dT%H:%M:%S"

    @classmethod
    def for_cli(cls, debug: bool = False, log_file: Optional[str] = None) -> "LoggingConfig":
        """
        Settings for one CLI invocation.

        Args:
            debug: Value of ``--debug``.
            log_file: Value of ``--log-file``.

        Returns:
            LoggingConfig: stderr logging, plus the file when requested.
        """
        return cls(level=VERBOSE_LEVEL if debug else QUIET_LEVEL, console=True, log_file=log_file or None)

    @property
    def level_no(self) -> int:
        return parse_level(self.level)
