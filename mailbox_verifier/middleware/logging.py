"""Logging configuration for verification runs."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional, Union

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
MB = 1024 * 1024

# Chatty transport libraries
QUIET_LOGGERS = ("exchangelib", "urllib3", "requests", "requests_ntlm", "requests_oauthlib")


def _rotating_handler(path: Path, level: int, max_mb: int, backups: int, fmt: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=max_mb * MB, backupCount=backups, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(fmt)
    return handler


def setup_logging(log_level: str = "INFO", log_dir: Union[str, Path] = "logs") -> None:
    """Configure logging for a verification run.

    - stderr: snapshot, erase and reconciliation progress at INFO
    - mailbox-verifier.log: everything at DEBUG, for troubleshooting a run
    - mailbox-verifier-errors.log: ERROR and above only
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"))

    detailed = logging.Formatter(DETAILED_FORMAT)
    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root.addHandler(console)
    root.addHandler(_rotating_handler(log_dir / "mailbox-verifier.log", logging.DEBUG, 10, 5, detailed))
    root.addHandler(_rotating_handler(log_dir / "mailbox-verifier-errors.log", logging.ERROR, 10, 3, detailed))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging to {log_dir} at level {log_level.upper()}")


class AuditLogger:
    """
    Record of destructive mailbox operations.

    With a log_dir, entries go to audit.log only; without one they
    propagate to the root handlers like any other log record.
    """

    def __init__(self, log_dir: Optional[Union[str, Path]] = None):
        self.logger = logging.getLogger("audit")
        self.logger.setLevel(logging.INFO)

        if log_dir is not None:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            fmt = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
            self.logger.addHandler(_rotating_handler(log_dir / "audit.log", logging.INFO, 20, 10, fmt))
            self.logger.propagate = False

    def log_operation(
        self,
        operation: str,
        user: str,
        success: bool,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Write one audit entry; failures are logged at WARNING."""
        entry = f"op={operation} | user={user} | success={success}"
        if details:
            entry += " | " + ", ".join(f"{key}={value}" for key, value in details.items())
        self.logger.log(logging.INFO if success else logging.WARNING, entry)
