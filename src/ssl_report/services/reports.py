"""Report generation service and on-disk report store."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from ssl_report.core.errors import ReportError
from ssl_report.models import Report
from ssl_report.services.assessment_client import AssessmentClient, AssessmentOptions
from ssl_report.services.renderer import render

logger = logging.getLogger(__name__)


class ReportService:
    """Runs an assessment and renders its result into a report."""

    def __init__(self, client: AssessmentClient, options: AssessmentOptions | None = None) -> None:
        self._client = client
        self._options = options or AssessmentOptions()

    async def generate_report(self, host: str) -> Report:
        """Assess ``host`` and render the completed assessment.

        Raises:
            ReportError: Any assessment, validation or rendering failure; no
                report is produced in that case
        """
        try:
            assessment = await self._client.assess(host, self._options)
            report = render(assessment)
        except ReportError as exc:
            logger.warning("No report for %r (%s): %s", host, exc.kind.value, exc.message)
            raise
        logger.info(
            "Rendered report %s for %s (%d endpoint(s), %d bytes)",
            report.identifier,
            assessment.host,
            len(assessment.endpoints),
            report.size,
        )
        return report


class ReportStore:
    """Directory of generated reports, one file per host.

    Saving a report for a host that already has one overwrites it.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path_for(self, identifier: str) -> Path:
        name = Path(identifier).name
        if name != identifier or name in {"", ".", ".."}:
            raise ValueError(f"Invalid report identifier: {identifier!r}")
        return self.directory / name

    def save(self, report: Report) -> Path:
        """Write the report atomically and return its path."""
        path = self.path_for(report.identifier)
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=".pdf")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(report.content)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info("Saved report %s (%d bytes)", path, report.size)
        return path
