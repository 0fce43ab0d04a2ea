"""Core application components package."""

from .config import Settings, settings
from .errors import (
    AssessmentError,
    AssessmentFailedError,
    AssessmentTimeoutError,
    AssessmentValidationError,
    ErrorKind,
    InvalidInputError,
    RenderError,
    ReportError,
    ServiceUnavailableError,
    StartupError,
    SubmissionFailedError,
)
from .version import get_version

__all__ = [
    "Settings",
    "settings",
    "AssessmentError",
    "AssessmentFailedError",
    "AssessmentTimeoutError",
    "AssessmentValidationError",
    "ErrorKind",
    "InvalidInputError",
    "RenderError",
    "ReportError",
    "ServiceUnavailableError",
    "StartupError",
    "SubmissionFailedError",
    "get_version",
]
