"""Pydantic schemas for assessment payloads and the report API."""

from .assessment import Assessment, AssessmentStatus, Endpoint, ServiceInfo
from .report import ReportErrorResponse, ReportRequest, ReportResponse, ServiceInfoResponse

__all__ = [
    "Assessment",
    "AssessmentStatus",
    "Endpoint",
    "ServiceInfo",
    "ReportErrorResponse",
    "ReportRequest",
    "ReportResponse",
    "ServiceInfoResponse",
]
