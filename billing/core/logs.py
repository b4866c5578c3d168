"""
Logging utilities for the billing service.

Provides a logger factory so every module logs with the same format and the
level configured through LOG_LEVEL.
"""

import logging
from pathlib import Path

from billing.core.config import settings

PACKAGE = "billing"


def logger_name(name: str) -> str:
    """
    Dotted logger name for a module name or a ``__file__`` path.

    Paths are named after the module's location inside the package, so
    ``billing/domain/invoicing/service.py`` logs as
    ``billing.domain.invoicing.service``.
    """
    if "/" in name or "\\" in name:
        parts = Path(name).with_suffix("").parts
        if PACKAGE in parts:
            start = len(parts) - parts[::-1].index(PACKAGE)
            name = ".".join(parts[start:])
        else:
            name = parts[-1]

    if name == PACKAGE or name.startswith(PACKAGE + "."):
        return name
    return f"{PACKAGE}.{name}"


def logger(name: str) -> logging.Logger:
    """Create and configure a logger for the given module name or path."""
    log = logging.getLogger(logger_name(name))

    if not log.handlers:
        log.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        log.addHandler(handler)

    return log
