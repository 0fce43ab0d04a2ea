"""Version module for reading application version from environment or package metadata."""

import os
from importlib.metadata import PackageNotFoundError, version

PACKAGE_NAME = "ssl-report"


def get_version() -> str:
    """Get the application version.

    Checks the APP_VERSION environment variable first, then the installed
    package metadata, then falls back to 'unknown'.

    Returns:
        str: The version string, or 'unknown' if not found.
    """
    # Environment variable wins (set by container builds)
    env_version = os.environ.get("APP_VERSION", "").strip()
    if env_version:
        return env_version

    try:
        return version(PACKAGE_NAME)
    except PackageNotFoundError:
        return "unknown"
