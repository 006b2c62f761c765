"""
Logging configuration for rcs.

Quiet by default: only warnings reach stderr. --verbose (or
RCS_VERBOSE=1) switches to debug output, and every store keeps a
persistent operations log.
"""

import logging
import sys
import warnings
from logging.handlers import RotatingFileHandler
from pathlib import Path


def configure_quiet_mode(quiet: bool = True):
    """
    Keep console output limited to warnings and errors.

    Args:
        quiet: If True, suppress verbose output. If False, show info messages.
    """
    if quiet:
        warnings.filterwarnings("ignore")
    logging.getLogger("rcs").setLevel(logging.WARNING if quiet else logging.INFO)


def enable_debug_mode():
    """Enable debug-level logging to stderr."""
    warnings.filterwarnings("default")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Add stderr handler if not already present
    if not any(isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
               for h in root_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S"
        ))
        root_logger.addHandler(handler)

    logging.getLogger("rcs").setLevel(logging.DEBUG)


def configure_ops_log(store_path):
    """Configure a persistent operations log for a snippet store.

    Writes to {store_path}/rcs-ops.log using a rotating file handler
    (1MB max, 3 backups). Always active regardless of --verbose.
    Returns the handler so the caller can remove it again.
    """
    log_path = Path(store_path) / "rcs-ops.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        str(log_path),
        maxBytes=1_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    rcs_logger = logging.getLogger("rcs")
    rcs_logger.addHandler(handler)
    # Ensure rcs logger allows INFO through even in quiet mode
    if rcs_logger.level == logging.NOTSET or rcs_logger.level > logging.INFO:
        rcs_logger.setLevel(logging.INFO)

    return handler
