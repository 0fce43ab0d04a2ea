"""SSL Labs assessment schemas."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Per-endpoint status messages the upstream reports while an endpoint is still being scanned
PENDING_ENDPOINT_MESSAGES = frozenset({"pending", "in progress"})


class AssessmentStatus(str, Enum):
    """Coarse assessment lifecycle reported by SSL Labs."""

    DNS = "DNS"
    IN_PROGRESS = "IN_PROGRESS"
    READY = "READY"
    ERROR = "ERROR"

    @property
    def is_terminal(self) -> bool:
        return self in (AssessmentStatus.READY, AssessmentStatus.ERROR)


class _UpstreamModel(BaseModel):
    """Immutable model populated from camelCase upstream JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class Endpoint(_UpstreamModel):
    """One resolved address of the assessed host."""

    ip_address: str
    server_name: str = ""
    status_message: str = ""
    grade: str = ""
    grade_trust_ignored: str = ""
    has_warnings: bool = False
    is_exceptional: bool = False
    progress: int | None = None  # percent, -1 before the scan starts
    duration: int | None = None  # milliseconds

    @field_validator("server_name", "status_message", "grade", "grade_trust_ignored", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def is_resolved(self) -> bool:
        """Whether the upstream finished scanning this endpoint.

        The status message decides. Without one, a progress between 0 and 99
        means the scan is still running.
        """
        message = self.status_message.strip().lower()
        if message:
            return message not in PENDING_ENDPOINT_MESSAGES
        return self.progress is None or not 0 <= self.progress < 100


class Assessment(_UpstreamModel):
    """Snapshot of one SSL Labs assessment."""

    host: str = Field(min_length=1)
    port: int = 443
    protocol: str = "http"
    is_public: bool = False
    status: AssessmentStatus
    status_message: str = ""
    start_time: int | None = None
    test_time: int | None = None
    engine_version: str = ""
    criteria_version: str = ""
    endpoints: tuple[Endpoint, ...] = ()

    @field_validator("endpoints", mode="before")
    @classmethod
    def none_as_no_endpoints(cls, value: Any) -> Any:
        return () if value is None else value

    @field_validator("status_message", "engine_version", "criteria_version", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def is_complete(self) -> bool:
        """READY with at least one endpoint and every endpoint resolved."""
        return (
            self.status is AssessmentStatus.READY
            and len(self.endpoints) > 0
            and all(endpoint.is_resolved for endpoint in self.endpoints)
        )

    @property
    def pending_endpoints(self) -> int:
        return sum(1 for endpoint in self.endpoints if not endpoint.is_resolved)


class ServiceInfo(_UpstreamModel):
    """Response of the SSL Labs /info capability probe."""

    engine_version: str = ""
    criteria_version: str = ""
    max_assessments: int = 0
    current_assessments: int = 0
    new_assessment_cool_off: int = 0  # milliseconds
    messages: list[str] = Field(default_factory=list)

    @property
    def at_capacity(self) -> bool:
        return self.max_assessments > 0 and self.current_assessments >= self.max_assessments
