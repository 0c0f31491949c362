# Copyright 2025 Hewlett Packard Enterprise Development LP.
# SPDX-License-Identifier: MIT
#
# Logging utilities - Centralized logging configuration for library and CLI usage.

"""
Logging utilities for tpm_pytools

Library modules only ask for named loggers. Handlers are installed by the
command-line tools through setup_cli_logging, or by an embedding application
through setup_logging.
"""

import logging
import sys
from typing import Optional, Union

CLI_FORMAT = "%(name)s - %(levelname)s: %(message)s"
LIBRARY_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"


class ColoredFormatter(logging.Formatter):
    """Formatter that adds colors to log levels (for CLI mode)."""

    # ANSI escapes per level name
    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record):
        levelname = record.levelname
        color = self.COLORS.get(levelname)
        if color:
            record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # The file handler sees the same record
            record.levelname = levelname


def _resolve_level(level: Union[str, int], verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def setup_logging(
    name: str = "tpm_pytools",
    level: Union[str, int] = logging.INFO,
    cli_mode: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Install console (and optionally file) handlers on the root logger.

    Any handlers already on the root logger are replaced.

    Args:
        name: Name of the logger to return (default: "tpm_pytools")
        level: Logging level (default: INFO)
        cli_mode: Short colored console lines instead of timestamped ones
        verbose: Log at DEBUG regardless of level
        quiet: Log at WARNING regardless of level (ignored when verbose)
        log_file: Optional file that receives the same records, uncolored

    Returns:
        The named logger
    """
    level = _resolve_level(level, verbose, quiet)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    # Verdicts are part of the tool's output, so the console handler is on stdout
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    if cli_mode:
        console_handler.setFormatter(ColoredFormatter(CLI_FORMAT))
    else:
        console_handler.setFormatter(logging.Formatter(LIBRARY_FORMAT))
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        root_logger.addHandler(file_handler)

    return logging.getLogger(name)


def get_logger(name: str = "tpm_pytools") -> logging.Logger:
    """Named logger for a tpm_pytools module."""
    return logging.getLogger(name)


def setup_cli_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """Logging for the tpm-checkquote and tpm-print-quote tools."""
    return setup_logging(cli_mode=True, verbose=verbose, quiet=quiet, log_file=log_file)


logger = get_logger(__name__)


def log_verification_step(step: str, status: str, details: str = "") -> None:
    """
    Log one verification step.

    PASS/SUCCESS/OK are logged at info with a check mark, FAIL/FAILED/ERROR
    at error with "!", SKIP/SKIPPED at info with "-". Anything else is
    logged at info unmarked.
    """
    suffix = f" - {details}" if details else ""
    status_upper = status.upper()
    if status_upper in ("PASS", "SUCCESS", "OK"):
        logger.info(f"✓ {step}: {status}{suffix}")
    elif status_upper in ("FAIL", "FAILED", "ERROR"):
        logger.error(f"! {step}: {status}{suffix}")
    elif status_upper in ("SKIP", "SKIPPED"):
        # Optional checks are skipped on purpose
        logger.info(f"- {step}: {status}{suffix}")
    else:
        logger.info(f"  {step}: {status}{suffix}")


def log_section_header(title: str) -> None:
    logger.debug(f"Section: {title}")


def log_hexdump(label: str, data: bytes) -> None:
    """Log a labelled hex dump of a buffer at debug level."""
    logger.debug(f"{label} ({len(data)} bytes): {data.hex()}")
