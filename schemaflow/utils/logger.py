# schemaflow/utils/logger.py
"""
Project-wide logging.

Every module asks for a child of the `schemaflow` logger through
`get_logger(...)`; only the CLI (or an embedding application) decides where
records go, by calling `init_logger` once settings are known. Records go to
stderr so that command output on stdout (e.g. `schemas --json`) stays
machine-readable.
"""
from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER = "schemaflow"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVEL_COLORS = {
    logging.CRITICAL: "\033[95m",  # magenta
    logging.ERROR: "\033[91m",     # red
    logging.WARNING: "\033[93m",   # yellow
    logging.INFO: "\033[92m",      # green
}
_RESET = "\033[0m"


def parse_level(value: Union[str, int, None], default: int = logging.INFO) -> int:
    """Accept a level name ('warning', 'WARN') or number; unknown names fall back to `default`."""
    if value is None or value == "":
        return default
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else default


def env_level(default: int = logging.INFO) -> int:
    """Level from the LOG_LEVEL environment variable."""
    return parse_level(os.getenv("LOG_LEVEL"), default)


class _ColorFormatter(logging.Formatter):
    """Colors the level name when the handler writes to a terminal."""

    def __init__(self, use_color: bool):
        super().__init__(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color:
            return super().format(record)
        color = next((c for lvl, c in _LEVEL_COLORS.items() if record.levelno >= lvl), "")
        plain = record.levelname
        record.levelname = f"{color}{plain}{_RESET}" if color else plain
        try:
            return super().format(record)
        finally:
            record.levelname = plain


def _reset_handlers(logger: logging.Logger) -> None:
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()


def init_logger(
    name: str = ROOT_LOGGER,
    level: Optional[int] = None,
    log_dir: Union[str, Path, None] = None,
    file_name: str = "schemaflow.log",
    file_max_mb: int = 5,
    file_backup: int = 3,
) -> logging.Logger:
    """
    (Re)configure the project logger: a stderr handler, plus a rotating file
    handler under `log_dir` when one is given. Safe to call more than once;
    previous handlers are closed and replaced.
    """
    logger = logging.getLogger(name)
    _reset_handlers(logger)
    logger.propagate = False
    logger.setLevel(level if level is not None else env_level())

    stream = sys.stderr
    sh = logging.StreamHandler(stream)
    sh.setFormatter(_ColorFormatter(use_color=hasattr(stream, "isatty") and stream.isatty()))
    logger.addHandler(sh)

    if log_dir:
        log_dir = Path(log_dir).expanduser()
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            filename=str(log_dir / file_name),
            maxBytes=file_max_mb * 1024 * 1024,
            backupCount=file_backup,
            encoding="utf-8",
        )
        fh.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(fh)

    return logger


# Library default: warnings and up to stderr until the application configures logging.
init_logger(level=env_level(logging.WARNING))


def get_logger(child: str) -> logging.Logger:
    """Child logger under the project root, e.g. `schemaflow.registry`."""
    return logging.getLogger(ROOT_LOGGER).getChild(child)
