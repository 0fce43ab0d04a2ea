"""Pytest configuration and fixtures for ssl_report tests."""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Any

import httpx
import pytest

from ssl_report.schemas.assessment import Assessment
from ssl_report.services.assessment_client import (
    AssessmentClient,
    AssessmentOptions,
    BackoffPolicy,
)

TEST_API_URL = "https://ssllabs.test/api/v3"

DEFAULT_INFO: dict[str, Any] = {
    "engineVersion": "2.3.0",
    "criteriaVersion": "2009q",
    "maxAssessments": 25,
    "currentAssessments": 0,
    "newAssessmentCoolOff": 1000,
    "messages": ["This assessment service is provided free of charge."],
}

FIXED_GENERATED_AT = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc)


# ============================================================================
# Payload Factories
# ============================================================================


def endpoint_payload(
    ip_address: str = "93.184.216.34",
    grade: str = "A",
    status_message: str = "Ready",
    **overrides: Any,
) -> dict[str, Any]:
    """Build an endpoint entry as returned by /analyze."""
    payload: dict[str, Any] = {
        "ipAddress": ip_address,
        "serverName": "",
        "statusMessage": status_message,
        "grade": grade,
        "gradeTrustIgnored": grade,
        "hasWarnings": False,
        "isExceptional": False,
        "progress": 100 if status_message == "Ready" else 42,
        "duration": 71234,
        "delegation": 1,
    }
    payload.update(overrides)
    return payload


def analyze_payload(
    status: str = "READY",
    host: str = "example.com",
    endpoints: list[dict[str, Any]] | None = None,
    **overrides: Any,
) -> dict[str, Any]:
    """Build an /analyze response document."""
    payload: dict[str, Any] = {
        "host": host,
        "port": 443,
        "protocol": "http",
        "isPublic": False,
        "status": status,
        "startTime": 1714566000000,
        "testTime": 1714566090000,
        "engineVersion": "2.3.0",
        "criteriaVersion": "2009q",
    }
    if endpoints is not None:
        payload["endpoints"] = endpoints
    payload.update(overrides)
    return payload


def make_assessment(*endpoints: dict[str, Any], host: str = "example.com") -> Assessment:
    """Build a READY assessment from endpoint payloads."""
    return Assessment.model_validate(
        analyze_payload(host=host, endpoints=list(endpoints) or [endpoint_payload()])
    )


# ============================================================================
# Fake SSL Labs API
# ============================================================================


class FakeSSLLabs:
    """Scripted stand-in for the SSL Labs API, used as an httpx.MockTransport handler.

    /analyze answers are consumed in order; the last one repeats forever.
    Items may be payload dicts, httpx.Response objects or exceptions to raise.
    """

    def __init__(
        self,
        analyze: list[Any] | None = None,
        info: Any = None,
    ) -> None:
        self.analyze_script = analyze or [analyze_payload(endpoints=[endpoint_payload()])]
        self.info = DEFAULT_INFO if info is None else info
        self.requests: list[httpx.Request] = []
        self.analyze_times: list[float] = []
        self._index = 0

    @property
    def analyze_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/analyze")]

    @property
    def info_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/info")]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/info"):
            return self._answer(self.info)
        if request.url.path.endswith("/analyze"):
            self.analyze_times.append(time.monotonic())
            item = self.analyze_script[min(self._index, len(self.analyze_script) - 1)]
            self._index += 1
            return self._answer(item)
        return httpx.Response(404, json={"errors": [{"message": "not found"}]})

    @staticmethod
    def _answer(item: Any) -> httpx.Response:
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, httpx.Response):
            return item
        return httpx.Response(200, json=item)


@pytest.fixture
def fake_api() -> FakeSSLLabs:
    """Fake API answering READY immediately."""
    return FakeSSLLabs()


@pytest.fixture
async def assessment_client(fake_api: FakeSSLLabs) -> AsyncGenerator[AssessmentClient, None]:
    """Assessment client wired to the fake API."""
    client = AssessmentClient(TEST_API_URL, transport=httpx.MockTransport(fake_api))
    yield client
    await client.aclose()


@pytest.fixture
def fast_options() -> AssessmentOptions:
    """Polling options with short delays so tests finish quickly."""
    return AssessmentOptions(
        max_poll_duration=2.0,
        backoff=BackoffPolicy(initial=0.02, factor=2.0, maximum=0.05),
    )
