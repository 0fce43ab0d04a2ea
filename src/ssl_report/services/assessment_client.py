"""SSL Labs API client driving an assessment from submission to a terminal state."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any

import httpx
from pydantic import ValidationError

from ssl_report.core.errors import (
    AssessmentFailedError,
    AssessmentTimeoutError,
    ServiceUnavailableError,
    SubmissionFailedError,
)
from ssl_report.models import AssessmentRequest
from ssl_report.schemas.assessment import Assessment, AssessmentStatus, ServiceInfo
from ssl_report.services import normalizer
from ssl_report.services.hosts import normalize_host

logger = logging.getLogger(__name__)

# Constants
DEFAULT_API_URL = "https://api.ssllabs.com/api/v3"
REQUEST_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_POLL_DURATION = 300.0
DEFAULT_POLL_INTERVAL = 10.0
DEFAULT_POLL_INTERVAL_MAX = 60.0
DEFAULT_BACKOFF_FACTOR = 2.0
# 429: too many requests, 529: service overloaded
THROTTLE_STATUS_CODES = frozenset({429, 529})


@dataclass(frozen=True)
class BackoffPolicy:
    """Delay between polls: starts at initial, grows by factor, capped at maximum."""

    initial: float = DEFAULT_POLL_INTERVAL
    factor: float = DEFAULT_BACKOFF_FACTOR
    maximum: float = DEFAULT_POLL_INTERVAL_MAX

    def __post_init__(self) -> None:
        if self.initial <= 0:
            raise ValueError("initial poll interval must be positive")
        if self.factor < 1:
            raise ValueError("backoff factor must be at least 1")
        if self.maximum < self.initial:
            raise ValueError("maximum poll interval must not be below the initial interval")

    def next_delay(self, current: float) -> float:
        """Return the delay to use after a poll that waited ``current`` seconds."""
        return min(max(current, self.initial) * self.factor, self.maximum)


@dataclass(frozen=True)
class AssessmentOptions:
    """Per-call polling configuration."""

    max_poll_duration: float = DEFAULT_MAX_POLL_DURATION
    backoff: BackoffPolicy = field(default_factory=BackoffPolicy)
    start_new: bool = False

    def __post_init__(self) -> None:
        if self.max_poll_duration <= 0:
            raise ValueError("max_poll_duration must be positive")


class _TransientPollError(Exception):
    """A poll round trip failed in a way that warrants polling again."""

    def __init__(self, reason: str, throttled: bool = False) -> None:
        super().__init__(reason)
        self.throttled = throttled


def _upstream_error_text(response: httpx.Response) -> str:
    """Extract the error messages SSL Labs puts in its JSON error bodies."""
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(payload, dict):
        messages = [
            str(error.get("message"))
            for error in payload.get("errors") or []
            if isinstance(error, dict) and error.get("message")
        ]
        if messages:
            return "; ".join(messages)
    return response.text[:200]


async def _sleep_until(deadline: float) -> None:
    # The event loop may wake a timer up to one clock tick early
    while (remaining := deadline - time.monotonic()) > 0:
        await asyncio.sleep(remaining)


class AssessmentClient:
    """HTTP client for the SSL Labs assessment API.

    Construct once at startup and share it; each ``assess`` call keeps its
    polling state on its own stack so concurrent calls are independent.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"User-Agent": user_agent} if user_agent else None
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> AssessmentClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def get_info(self) -> ServiceInfo:
        """Fetch service metadata from /info.

        Raises:
            ServiceUnavailableError: If the service is unreachable or answers garbage
        """
        try:
            response = await self._client.get("/info")
        except httpx.RequestError as exc:
            raise ServiceUnavailableError(
                f"SSL Labs API not reachable: {type(exc).__name__}: {exc}"
            ) from exc
        if response.status_code != 200:
            raise ServiceUnavailableError(
                f"SSL Labs API info returned HTTP {response.status_code}"
            )
        try:
            return ServiceInfo.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise ServiceUnavailableError(f"SSL Labs API info response is malformed: {exc}") from exc

    async def probe(self) -> ServiceInfo:
        """Check that the service is reachable and accepts new assessments.

        Raises:
            ServiceUnavailableError: If the service is down or at capacity
        """
        info = await self.get_info()
        if info.at_capacity:
            raise ServiceUnavailableError(
                f"SSL Labs API at capacity ({info.current_assessments}/"
                f"{info.max_assessments} assessments running)"
            )
        return info

    async def assess(self, host: str, options: AssessmentOptions | None = None) -> Assessment:
        """Run an assessment of ``host`` until it reaches a terminal state.

        Args:
            host: DNS name or IP address to assess
            options: Polling options; defaults apply when omitted

        Returns:
            READY assessment with at least one endpoint, all endpoints resolved

        Raises:
            InvalidInputError: Host is empty or malformed (no request is made)
            ServiceUnavailableError: Pre-flight probe failed (no assessment is submitted)
            SubmissionFailedError: The service rejected the request
            AssessmentFailedError: The service reported status ERROR
            AssessmentTimeoutError: No terminal state within max_poll_duration
            AssessmentValidationError: The service returned a malformed payload
        """
        options = options or AssessmentOptions()
        request = AssessmentRequest(host=normalize_host(host))

        await self.probe()

        started = time.monotonic()
        deadline = started + options.max_poll_duration
        logger.info(
            "Submitting assessment for %s (startNew=%s, max %.0fs)",
            request.host,
            options.start_new,
            options.max_poll_duration,
        )
        payload: dict[str, Any] | None = await self._submit(request.host, options.start_new)

        delay = options.backoff.initial
        last_status: AssessmentStatus | None = None
        polls = 1
        while True:
            if payload is not None:
                snapshot = normalizer.parse_payload(payload)
                if snapshot.status is not last_status:
                    logger.info("Assessment of %s is %s", request.host, snapshot.status.value)
                    last_status = snapshot.status

                if snapshot.status.is_terminal:
                    if snapshot.status is AssessmentStatus.ERROR:
                        logger.warning(
                            "Assessment of %s failed upstream: %s",
                            request.host,
                            snapshot.status_message,
                        )
                        raise AssessmentFailedError(
                            request.host, snapshot.status_message or "unknown error"
                        )
                    if snapshot.is_complete:
                        logger.info(
                            "Assessment of %s complete after %d poll(s) in %.1fs: %d endpoint(s)",
                            request.host,
                            polls,
                            time.monotonic() - started,
                            len(snapshot.endpoints),
                        )
                        for endpoint in snapshot.endpoints:
                            logger.debug(
                                "Endpoint %s: grade %s (%s ms)",
                                endpoint.ip_address,
                                endpoint.grade or "-",
                                endpoint.duration if endpoint.duration is not None else "?",
                            )
                        return normalizer.normalize(payload)
                    logger.debug(
                        "Assessment of %s is READY with %d endpoint(s), %d still pending",
                        request.host,
                        len(snapshot.endpoints),
                        snapshot.pending_endpoints,
                    )

            now = time.monotonic()
            if deadline - now < delay:
                await _sleep_until(deadline)
                elapsed = time.monotonic() - started
                logger.warning(
                    "Assessment of %s timed out after %.1fs (last status %s)",
                    request.host,
                    elapsed,
                    last_status.value if last_status else "unknown",
                )
                raise AssessmentTimeoutError(
                    request.host, elapsed, last_status.value if last_status else None
                )

            await _sleep_until(now + delay)
            delay = options.backoff.next_delay(delay)
            polls += 1
            try:
                payload = await self._poll(request.host)
            except _TransientPollError as exc:
                logger.warning("Polling %s failed (%s); will retry", request.host, exc)
                payload = None
                if exc.throttled:
                    delay = options.backoff.maximum

    async def _submit(self, host: str, start_new: bool) -> dict[str, Any]:
        """Start (or attach to) an assessment and return the first snapshot."""
        params = {"host": host, "all": "done"}
        if start_new:
            params["startNew"] = "on"
        try:
            response = await self._client.get("/analyze", params=params)
        except httpx.RequestError as exc:
            raise SubmissionFailedError(
                f"Could not submit assessment for {host}: {type(exc).__name__}: {exc}"
            ) from exc
        if response.status_code != 200:
            raise SubmissionFailedError(
                f"SSL Labs rejected assessment for {host} "
                f"(HTTP {response.status_code}): {_upstream_error_text(response)}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise SubmissionFailedError(
                f"SSL Labs returned an undecodable response for {host}",
                status_code=response.status_code,
            ) from exc
        return payload

    async def _poll(self, host: str) -> dict[str, Any]:
        """Fetch the current state of a running assessment."""
        try:
            response = await self._client.get("/analyze", params={"host": host, "all": "done"})
        except httpx.RequestError as exc:
            raise _TransientPollError(f"{type(exc).__name__}: {exc}") from exc

        if response.status_code in THROTTLE_STATUS_CODES:
            raise _TransientPollError(f"HTTP {response.status_code}", throttled=True)
        if 500 <= response.status_code <= 599:
            raise _TransientPollError(f"HTTP {response.status_code}")
        if response.status_code != 200:
            raise SubmissionFailedError(
                f"SSL Labs rejected status request for {host} "
                f"(HTTP {response.status_code}): {_upstream_error_text(response)}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise _TransientPollError("undecodable response body") from exc
