"""Logging setup shared by the API and the CLI entry point."""

from __future__ import annotations

import logging

from hr_payroll.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


def configure_logging(settings: Settings) -> None:
    """Install a single stream handler on the package logger.

    Safe to call more than once; only the level is updated on repeat calls.
    """
    global _configured
    package_logger = logging.getLogger("hr_payroll")
    package_logger.setLevel(settings.log_level)

    if _configured:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.propagate = False
    _configured = True
