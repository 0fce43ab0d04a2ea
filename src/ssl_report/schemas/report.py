"""Report API request and response schemas."""

from datetime import datetime

from pydantic import BaseModel


class ReportRequest(BaseModel):
    """Request body for generating a report."""

    host: str


class ReportResponse(BaseModel):
    """Location and summary of a generated report."""

    host: str
    identifier: str
    url: str
    generated_at: datetime
    endpoint_count: int
    grades: list[str]


class ReportErrorResponse(BaseModel):
    """Error body returned when no report could be produced."""

    detail: str
    kind: str


class ServiceInfoResponse(BaseModel):
    """Assessment service capabilities."""

    engine_version: str
    criteria_version: str
    max_assessments: int
    current_assessments: int
    messages: list[str]
