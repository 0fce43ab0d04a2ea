"""Validation of raw SSL Labs payloads into the assessment model."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from ssl_report.core.errors import AssessmentValidationError
from ssl_report.schemas.assessment import Assessment, AssessmentStatus


def _describe(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "payload"
        problems.append(f"{location}: {error['msg']}")
    return "; ".join(problems)


def parse_payload(payload: Any) -> Assessment:
    """Parse one /analyze response into an Assessment snapshot.

    Required fields are host and status. Numeric and boolean fields are
    coerced, endpoint order is preserved as received.

    Raises:
        AssessmentValidationError: If the payload is structurally incompatible
    """
    if not isinstance(payload, Mapping):
        raise AssessmentValidationError(
            f"Assessment payload must be a JSON object, got {type(payload).__name__}"
        )
    try:
        return Assessment.model_validate(dict(payload))
    except ValidationError as exc:
        raise AssessmentValidationError(f"Invalid assessment payload: {_describe(exc)}") from exc


def normalize(payload: Any) -> Assessment:
    """Parse a payload and enforce that READY assessments carry endpoints.

    Raises:
        AssessmentValidationError: If parsing fails or a READY payload has no endpoints
    """
    assessment = parse_payload(payload)
    if assessment.status is AssessmentStatus.READY and not assessment.endpoints:
        raise AssessmentValidationError(
            f"Assessment of {assessment.host} is READY but lists no endpoints"
        )
    return assessment
