"""CLI logging setup: leveled console output plus a timestamped run log."""

import logging
import sys
from datetime import datetime
from pathlib import Path

from dockhand.redact import SecretRedactingFilter

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_FORMAT = "[%(levelname)s] %(asctime)s %(message)s"

# ANSI colors for the level tag
_LEVEL_COLORS = {
    logging.INFO: "\033[34m",
    SUCCESS: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[31m",
}
_RESET = "\033[0m"


class _ColorLevelFormatter(logging.Formatter):
    """Console formatter that colors the ``[LEVEL]`` tag.

    The record is copied so the file handler still sees the plain level name.
    """

    def format(self, record):
        color = _LEVEL_COLORS.get(record.levelno)
        if color:
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{_RESET}"
        return super().format(record)


def log_success(logger: logging.Logger, msg, *args):
    """Log *msg* at the SUCCESS level."""
    logger.log(SUCCESS, msg, *args)


def default_log_path(log_dir=".") -> Path:
    """Return ``<log_dir>/deployment_YYYYmmdd_HHMMSS.log`` for the current time."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return Path(log_dir) / f"deployment_{stamp}.log"


def setup_cli_logging(log_file=None, stream=None):
    """Configure the root logger for a deploy run.

    Console records go to *stream* (stdout by default). When *log_file* is
    given, the same records are appended to it without colors.

    Returns:
        Path to the log file, or None when no file handler was attached.
    """
    stream = stream or sys.stdout
    root = logging.getLogger()
    root.setLevel(logging.INFO)
    # httpx logs every request at INFO; the readiness probe logs its own lines
    logging.getLogger("httpx").setLevel(logging.WARNING)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    redactor = SecretRedactingFilter()

    console_handler = logging.StreamHandler(stream)
    if getattr(stream, "isatty", lambda: False)():
        console_handler.setFormatter(_ColorLevelFormatter(_FORMAT, datefmt=_DATE_FORMAT))
    else:
        console_handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    console_handler.addFilter(redactor)
    root.addHandler(console_handler)

    if log_file is None:
        return None

    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    file_handler.addFilter(redactor)
    root.addHandler(file_handler)
    return log_file
