"""SSL Report - Main entry point."""

from __future__ import annotations

import asyncio
import sys

import uvicorn

from ssl_report.core.config import settings
from ssl_report.core.errors import StartupError
from ssl_report.core.logging_config import configure_logging
from ssl_report.main import check_assessment_service


def main() -> None:
    """Probe the assessment service, then serve the API."""
    logger = configure_logging(settings.log_level)
    logger.info("Checking SSL Labs API at %s", settings.ssllabs_api_url)

    try:
        asyncio.run(check_assessment_service(settings))
    except StartupError as exc:
        if settings.require_service_on_startup:
            logger.error("SSL Labs API service is not available: %s. Exiting.", exc)
            sys.exit(1)
        logger.warning("SSL Labs API service is not available: %s. Starting anyway.", exc)

    logger.info("Server starting on %s:%d", settings.server_host, settings.server_port)
    uvicorn.run(
        "ssl_report.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
