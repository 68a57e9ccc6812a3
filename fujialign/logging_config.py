"""
FUJIALIGN Logging Configuration

All engine loggers live under the "fujialign" namespace, e.g.
"fujialign.services.alignment" for scans and batches and
"fujialign.services.ephemeris" for kernel loading. The CLI configures that
namespace once from FujiAlignConfig.log_level / log_file; library users
can leave it alone and attach their own handlers.

Usage:
    from fujialign.logging_config import setup_logging, get_logger

    setup_logging(log_level="DEBUG", log_file="~/fujialign/search.log")
    logger = get_logger(__name__)
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys
from typing import Optional

NAMESPACE = "fujialign"
LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# A year of daily searches for a few dozen sites fits in a few files
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3


def setup_logging(log_level: str = "INFO", log_file: Optional[str | Path] = None) -> logging.Logger:
    """Attach stderr (and optionally a rotating file) to the fujialign logger.

    Repeated calls replace the handlers installed by the previous call, so
    the CLI can configure a quiet default before the config file is read
    and reconfigure afterwards.

    Args:
        log_level: Level name; unknown names fall back to INFO
        log_file: Log file path; parent directories are created

    Returns:
        The "fujialign" namespace logger
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    namespace = logging.getLogger(NAMESPACE)
    namespace.setLevel(level)
    for handler in list(namespace.handlers):
        namespace.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        namespace.addHandler(handler)

    return namespace


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` inside the fujialign namespace."""
    if name != NAMESPACE and not name.startswith(NAMESPACE + "."):
        name = f"{NAMESPACE}.{name}"
    return logging.getLogger(name)
