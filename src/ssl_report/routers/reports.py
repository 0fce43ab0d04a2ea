"""Report generation API endpoints."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse

from ssl_report.core.deps import AssessmentClientDep, ReportServiceDep, ReportStoreDep
from ssl_report.core.errors import ErrorKind, ReportError, ServiceUnavailableError
from ssl_report.models import Report
from ssl_report.schemas.report import (
    ReportErrorResponse,
    ReportRequest,
    ReportResponse,
    ServiceInfoResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["reports"])

DISCONNECT_CHECK_INTERVAL_SECONDS = 1.0
CLIENT_CLOSED_REQUEST = 499

ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.SERVICE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.SUBMISSION_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.ASSESSMENT_FAILED: 422,
    ErrorKind.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    ErrorKind.VALIDATION_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.RENDER_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(exc: ReportError) -> JSONResponse:
    """Translate a report failure into a user-facing JSON error."""
    detail = exc.user_message
    if exc.kind is not ErrorKind.RENDER_ERROR:
        detail = f"{detail}: {exc.message}"
    body = ReportErrorResponse(detail=detail, kind=exc.kind.value)
    return JSONResponse(
        status_code=ERROR_STATUS_CODES.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        content=body.model_dump(),
    )


async def _cancel_on_disconnect(
    request: Request, task: asyncio.Task[Report], disconnected: asyncio.Event
) -> None:
    """Cancel ``task`` once the HTTP client goes away."""
    while not task.done():
        await asyncio.sleep(DISCONNECT_CHECK_INTERVAL_SECONDS)
        if await request.is_disconnected():
            logger.info("Client disconnected; cancelling assessment")
            disconnected.set()
            task.cancel()
            return


@router.post(
    "",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
    responses={code: {"model": ReportErrorResponse} for code in set(ERROR_STATUS_CODES.values())},
)
async def create_report(
    payload: ReportRequest,
    request: Request,
    service: ReportServiceDep,
    store: ReportStoreDep,
) -> ReportResponse | JSONResponse:
    """Assess a host, render the result and publish the PDF under /files."""
    task = asyncio.create_task(service.generate_report(payload.host))
    disconnected = asyncio.Event()
    watcher = asyncio.create_task(_cancel_on_disconnect(request, task, disconnected))
    try:
        report = await task
    except ReportError as exc:
        return error_response(exc)
    except asyncio.CancelledError:
        if not disconnected.is_set():
            raise
        raise HTTPException(status_code=CLIENT_CLOSED_REQUEST, detail="Client closed request")
    finally:
        watcher.cancel()

    await asyncio.to_thread(store.save, report)
    assessment = report.assessment
    return ReportResponse(
        host=assessment.host,
        identifier=report.identifier,
        url=str(request.url_for("files", path=report.identifier)),
        generated_at=report.generated_at,
        endpoint_count=len(assessment.endpoints),
        grades=[endpoint.grade for endpoint in assessment.endpoints],
    )


@router.get(
    "/service-info",
    response_model=ServiceInfoResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ReportErrorResponse}},
)
async def get_service_info(client: AssessmentClientDep) -> ServiceInfoResponse | JSONResponse:
    """Report the assessment engine version and capacity."""
    try:
        info = await client.get_info()
    except ServiceUnavailableError as exc:
        return error_response(exc)
    return ServiceInfoResponse(
        engine_version=info.engine_version,
        criteria_version=info.criteria_version,
        max_assessments=info.max_assessments,
        current_assessments=info.current_assessments,
        messages=info.messages,
    )
