"""Logging setup for the report service."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(log_level: str) -> logging.Logger:
    """Configure root logging and return the package logger."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    # httpx logs each request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return logging.getLogger("ssl_report")
