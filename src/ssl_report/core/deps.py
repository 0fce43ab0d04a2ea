"""FastAPI dependencies for the shared assessment client and report services."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from ssl_report.services.assessment_client import AssessmentClient
from ssl_report.services.reports import ReportService, ReportStore


def get_assessment_client(request: Request) -> AssessmentClient:
    """Dependency returning the client created at application startup."""
    client = getattr(request.app.state, "assessment_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Assessment client not initialized",
        )
    return client


def get_report_service(request: Request) -> ReportService:
    """Dependency returning the report service created at application startup."""
    service = getattr(request.app.state, "report_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Report service not initialized",
        )
    return service


def get_report_store(request: Request) -> ReportStore:
    """Dependency returning the report store."""
    return request.app.state.report_store


# Type aliases for dependency injection
AssessmentClientDep = Annotated[AssessmentClient, Depends(get_assessment_client)]
ReportServiceDep = Annotated[ReportService, Depends(get_report_service)]
ReportStoreDep = Annotated[ReportStore, Depends(get_report_store)]
