"""SSL Report - FastAPI Application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .core.config import Settings, settings
from .core.errors import ServiceUnavailableError, StartupError
from .core.version import get_version
from .routers import reports, version
from .schemas.assessment import ServiceInfo
from .services.assessment_client import AssessmentClient
from .services.reports import ReportService, ReportStore

logger = logging.getLogger(__name__)


def build_assessment_client(
    config: Settings, transport: httpx.AsyncBaseTransport | None = None
) -> AssessmentClient:
    """Create the assessment client described by the settings."""
    return AssessmentClient(
        config.ssllabs_api_url,
        timeout=config.request_timeout,
        user_agent=f"{config.user_agent}/{get_version()}",
        transport=transport,
    )


async def check_assessment_service(
    config: Settings, transport: httpx.AsyncBaseTransport | None = None
) -> ServiceInfo:
    """Probe the assessment service once before serving requests.

    Raises:
        StartupError: If the service cannot be reached or is at capacity
    """
    async with build_assessment_client(config, transport) as client:
        try:
            info = await client.probe()
        except ServiceUnavailableError as exc:
            raise StartupError(str(exc)) from exc

    logger.info("SSL Labs API service information:")
    logger.info("Engine version: %s", info.engine_version)
    logger.info("Criteria version: %s", info.criteria_version)
    logger.info("Assessments: %d/%d", info.current_assessments, info.max_assessments)
    for message in info.messages:
        logger.info("SSL Labs: %s", message)
    return info


def create_app(
    config: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None
) -> FastAPI:
    """Build the application; the assessment client lives for the app lifespan."""
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Application lifespan handler for startup and shutdown events."""
        logger.info(f"SSL Report v{get_version()} starting...")
        Path(config.reports_dir).mkdir(parents=True, exist_ok=True)
        client = build_assessment_client(config, transport)
        app.state.assessment_client = client
        app.state.report_service = ReportService(client, config.assessment_options())

        yield

        # Shutdown: release pooled connections
        app.state.report_service = None
        app.state.assessment_client = None
        await client.aclose()

    app = FastAPI(
        title="SSL Report",
        description="SSL Labs assessments rendered as PDF reports",
        version=get_version(),
        lifespan=lifespan,
    )
    app.state.report_store = ReportStore(config.reports_dir)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(reports.router)
    app.include_router(version.router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok"}

    # Generated reports; the directory is created at startup
    app.mount(
        "/files",
        StaticFiles(directory=config.reports_dir, check_dir=False),
        name="files",
    )
    return app


app = create_app()
