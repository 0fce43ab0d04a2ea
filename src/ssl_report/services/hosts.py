"""Host input validation and normalization."""

from __future__ import annotations

import re
from ipaddress import ip_address

from ssl_report.core.errors import InvalidInputError

MAX_HOSTNAME_LENGTH = 253
HOSTNAME_LABEL_PATTERN = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$")
IDENTIFIER_UNSAFE_PATTERN = re.compile(r"[^a-z0-9.-]")


def normalize_host(value: str) -> str:
    """Validate a user supplied host and return its canonical form.

    Accepts DNS names and IPv4/IPv6 addresses. Surrounding whitespace and a
    single trailing dot are removed and names are lower-cased.

    Args:
        value: Raw host as typed by the user

    Returns:
        Normalized host

    Raises:
        InvalidInputError: If the host is empty or malformed
    """
    if not isinstance(value, str):
        raise InvalidInputError("Host must be a string")

    host = value.strip()
    if not host:
        raise InvalidInputError("Host is required")

    try:
        return ip_address(host.strip("[]")).compressed
    except ValueError:
        pass

    host = host.lower()
    if host.endswith("."):
        host = host[:-1]
    if not host or len(host) > MAX_HOSTNAME_LENGTH:
        raise InvalidInputError(f"Invalid host: {value!r}")

    labels = host.split(".")
    if not all(HOSTNAME_LABEL_PATTERN.match(label) for label in labels):
        raise InvalidInputError(f"Invalid host: {value!r}")
    # A numeric top-level label is a malformed address, not a name
    if labels[-1].isdigit():
        raise InvalidInputError(f"Invalid host: {value!r}")
    return host


def host_slug(host: str) -> str:
    """Filesystem-safe form of a normalized host."""
    return IDENTIFIER_UNSAFE_PATTERN.sub("_", host.lower())
