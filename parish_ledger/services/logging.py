"""Root logger setup for the ledger API.

Records go to stdout and to `settings.log_file` at one shared level, taken from
`settings.log_level` or the LOG_LEVEL environment variable.
"""

import logging
import os
import sys
from pathlib import Path

LEDGER_LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
LEDGER_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVELS = {
    name: getattr(logging, name) for name in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
}


def get_log_level(level_name: str | None = None) -> int:
    """Level constant for a name, INFO when the name is unknown."""
    name = level_name or os.getenv("LOG_LEVEL", "INFO")
    return LEVELS.get(name.upper(), logging.INFO)


def _handlers(log_path: Path) -> list[logging.Handler]:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return [logging.StreamHandler(sys.stdout), logging.FileHandler(log_path)]


def setup_server_logging(log_file: str = "logs/server.log", level_name: str | None = None) -> None:
    """Point the root logger at stdout and `log_file`.

    Handlers from earlier calls are closed and replaced, so calling this again
    (for example from a reloaded worker) never duplicates output.

    Args:
        log_file: Log file path; missing parent directories are created
        level_name: Level name overriding LOG_LEVEL
    """
    level = get_log_level(level_name)
    formatter = logging.Formatter(fmt=LEDGER_LOG_FORMAT, datefmt=LEDGER_DATE_FORMAT)

    root = logging.getLogger()
    for old in root.handlers[:]:
        root.removeHandler(old)
        old.close()
    root.setLevel(level)

    for handler in _handlers(Path(log_file)):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)


__all__ = ["LEVELS", "get_log_level", "setup_server_logging"]
