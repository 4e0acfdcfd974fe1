"""Local log file setup.

The interactive view owns the terminal, so log records go to a rotating file
under the platform log directory. Print mode can additionally mirror
warnings to stderr.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from platformdirs import user_log_dir

_LOGGER_NAME = "codeshow"
LOG_FILENAME = "codeshow.log"


def log_dir() -> Path:
    path = Path(user_log_dir(_LOGGER_NAME, appauthor=False))
    path.mkdir(parents=True, exist_ok=True)
    return path


def configure_logging(level: str = "INFO", *, console: bool = False, log_path: Path | None = None) -> logging.Logger:
    """Attach handlers to the package logger once and return it.

    File logging is skipped when the log directory cannot be created.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if logger.handlers:
        return logger
    logger.propagate = False

    try:
        path = log_path if log_path is not None else log_dir() / LOG_FILENAME
        handler = logging.handlers.RotatingFileHandler(
            filename=str(path),
            maxBytes=512 * 1024,
            backupCount=2,
            encoding="utf-8",
        )
    except OSError:
        handler = None
    if handler is not None:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(logging.WARNING)
        stream_handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        logger.addHandler(stream_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    logger.debug("logging configured")
    return logger
