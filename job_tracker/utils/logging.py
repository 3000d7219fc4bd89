"""Logging configuration for Job Tracker."""
import logging
import sys
from pathlib import Path
from typing import Optional

try:
    from systemd.journal import JournalHandler
    HAS_SYSTEMD = True
except ImportError:
    HAS_SYSTEMD = False

ROOT_LOGGER = "job_tracker"


def setup_logging(
    log_level: str = "INFO",
    use_systemd: bool = False,
    log_file: Optional[Path] = None
) -> logging.Logger:
    """Configure the job_tracker logger and return it.

    Handlers are replaced on every call. Console output goes to stderr so it
    does not mix with the shell's table output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        use_systemd: Send records to the systemd journal when available
        log_file: Optional path to log file

    Returns:
        Configured logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if use_systemd and HAS_SYSTEMD:
        journal_handler = JournalHandler(SYSLOG_IDENTIFIER=ROOT_LOGGER)
        journal_handler.setFormatter(formatter)
        logger.addHandler(journal_handler)
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Child of the job_tracker logger; names already under it are kept as is."""
    if name.startswith(f"{ROOT_LOGGER}.") or name == ROOT_LOGGER:
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
