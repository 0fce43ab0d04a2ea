"""Error taxonomy for assessment and report generation."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Categories of report generation failures."""

    INVALID_INPUT = "invalid_input"
    SERVICE_UNAVAILABLE = "service_unavailable"
    SUBMISSION_FAILED = "submission_failed"
    ASSESSMENT_FAILED = "assessment_failed"
    TIMEOUT = "timeout"
    VALIDATION_ERROR = "validation_error"
    RENDER_ERROR = "render_error"


class ReportError(Exception):
    """Base class for every failure that prevents a report from being produced."""

    kind: ErrorKind
    user_message = "Report generation failed"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AssessmentError(ReportError):
    """Failure raised by the assessment client."""


class InvalidInputError(AssessmentError):
    """The host is empty or not a valid DNS name or IP address."""

    kind = ErrorKind.INVALID_INPUT
    user_message = "Invalid host"


class ServiceUnavailableError(AssessmentError):
    """The pre-flight probe could not reach a responsive assessment service."""

    kind = ErrorKind.SERVICE_UNAVAILABLE
    user_message = "SSL Labs assessment service is unavailable"


class SubmissionFailedError(AssessmentError):
    """The assessment request was rejected or could not be delivered."""

    kind = ErrorKind.SUBMISSION_FAILED
    user_message = "SSL Labs rejected the assessment request"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AssessmentFailedError(AssessmentError):
    """The remote service finished the assessment with status ERROR."""

    kind = ErrorKind.ASSESSMENT_FAILED
    user_message = "SSL Labs reported an assessment error"

    def __init__(self, host: str, status_message: str) -> None:
        super().__init__(f"Assessment of {host} failed: {status_message}")
        self.host = host
        self.status_message = status_message


class AssessmentTimeoutError(AssessmentError):
    """The assessment did not reach a terminal state within the poll budget."""

    kind = ErrorKind.TIMEOUT
    user_message = "SSL Labs assessment timed out"

    def __init__(self, host: str, elapsed: float, last_status: str | None) -> None:
        super().__init__(
            f"Assessment of {host} not finished after {elapsed:.1f}s "
            f"(last status: {last_status or 'unknown'})"
        )
        self.host = host
        self.elapsed = elapsed
        self.last_status = last_status


class AssessmentValidationError(ReportError):
    """The assessment payload is structurally incompatible with the data model."""

    kind = ErrorKind.VALIDATION_ERROR
    user_message = "SSL Labs returned an invalid assessment"


class RenderError(ReportError):
    """Internal consistency violation detected while rendering a report."""

    kind = ErrorKind.RENDER_ERROR
    user_message = "Report rendering failed"


class StartupError(RuntimeError):
    """The service could not be started."""
