"""API routers."""

from . import reports, version

__all__ = ["reports", "version"]
