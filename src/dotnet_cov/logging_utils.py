"""Console and log-file handlers shared by coverage runs and the CLI."""

from __future__ import annotations

import logging
from pathlib import Path


PACKAGE_LOGGER_NAME = "dotnet_cov"
LOG_FILE_NAME = "dotnet_cov.log"
RUN_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
RUN_LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def package_logger() -> logging.Logger:
    """Logger every ``dotnet_cov`` module logger propagates to."""

    return logging.getLogger(PACKAGE_LOGGER_NAME)


def run_log_file(logs_root: Path) -> Path:
    return logs_root / LOG_FILE_NAME


def configure_logging(log_file: Path | None, verbose: bool = False) -> logging.Logger:
    """Route run logs to stderr and, when ``log_file`` is given, to a UTF-8 log file.

    ``verbose`` enables DEBUG output, which includes version and artifact selection details.
    """

    level = logging.DEBUG if verbose else logging.INFO
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(fmt=RUN_LOG_FORMAT, datefmt=RUN_LOG_DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        root_logger.addHandler(handler)

    logger = package_logger()
    logger.setLevel(level)
    return logger
