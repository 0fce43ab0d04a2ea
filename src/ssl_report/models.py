"""Data models for assessment requests and generated reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from ssl_report.schemas.assessment import Assessment


@dataclass(frozen=True)
class AssessmentRequest:
    """A validated request to assess one host."""

    host: str
    requested_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class Report:
    """Rendered PDF for a completed assessment."""

    assessment: Assessment
    generated_at: datetime
    content: bytes = field(repr=False)
    identifier: str

    @property
    def size(self) -> int:
        return len(self.content)
