"""Application configuration using pydantic-settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from ssl_report.services.assessment_client import AssessmentOptions


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Remote assessment service
    ssllabs_api_url: str = "https://api.ssllabs.com/api/v3"
    request_timeout: float = 30.0
    user_agent: str = "ssl-report"

    # Polling
    max_poll_duration: float = 300.0  # seconds
    poll_interval: float = 10.0  # seconds
    poll_interval_max: float = 60.0  # seconds
    poll_backoff_factor: float = 2.0
    start_new: bool = False

    # Generated reports
    reports_dir: str = "files"

    # Startup
    require_service_on_startup: bool = True

    # Server
    server_host: str = "0.0.0.0"
    server_port: int = 8080
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    def assessment_options(self) -> AssessmentOptions:
        """Build polling options from the configured values."""
        from ssl_report.services.assessment_client import AssessmentOptions, BackoffPolicy

        return AssessmentOptions(
            max_poll_duration=self.max_poll_duration,
            backoff=BackoffPolicy(
                initial=self.poll_interval,
                factor=self.poll_backoff_factor,
                maximum=self.poll_interval_max,
            ),
            start_new=self.start_new,
        )


settings = Settings()
