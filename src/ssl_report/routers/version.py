"""Version router for exposing the service version via API."""

from fastapi import APIRouter

from ssl_report.core.version import get_version

router = APIRouter(prefix="/api", tags=["version"])


@router.get("/version")
async def get_service_version() -> dict[str, str]:
    """Get the service version.

    This endpoint is public and requires no authentication.
    """
    return {"version": get_version(), "component": "ssl-report"}
