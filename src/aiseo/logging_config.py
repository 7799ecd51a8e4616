"""Logging setup for the aiseo package.

Only the ``aiseo`` logger tree is configured. The root logger is left to
whatever application embeds the analyzer.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "aiseo"
DEFAULT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Transport and SDK loggers that flood DEBUG output
QUIET_LIBRARIES = ("urllib3", "httpx", "httpcore", "openai", "anthropic")


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """Attach console and optional file handlers to the ``aiseo`` logger.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Log level name; unknown names mean INFO
        log_file: Optional log file path, parent directories are created
        format_string: Optional custom format string

    Returns:
        The package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    # stdout is reserved for reports
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    package_logger.setLevel(numeric_level)
    package_logger.propagate = False

    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    return package_logger
