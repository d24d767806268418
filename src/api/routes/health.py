"""
Liveness and readiness probes.

/health answers as long as the process runs. /health/ready also checks
that R2 settings are complete and that the store answers a bucket listing.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from ... import __version__
from ...config.settings import Settings
from ...core.objects.gateway import ObjectStore
from ..dependencies import SettingsDep, StorageClientDep

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str
    details: dict[str, Any] = {}


class ReadinessCheck(BaseModel):
    """Outcome of one readiness probe."""
    name: str
    status: str  # "ok" or "error"
    error: Optional[str] = None


class ReadinessResponse(BaseModel):
    status: str  # "ready" or "not_ready"
    version: str
    checks: list[ReadinessCheck]


def _check_configuration(settings: Settings) -> ReadinessCheck:
    missing_fields = settings.validate_required_fields()
    if missing_fields:
        return ReadinessCheck(
            name="configuration",
            status="error",
            error=f"Missing required fields: {', '.join(missing_fields)}",
        )
    return ReadinessCheck(name="configuration", status="ok")


def _check_storage(storage: ObjectStore) -> ReadinessCheck:
    try:
        bucket_count = len(storage.list_buckets())
    except Exception as e:
        logger.error("Storage readiness probe failed", extra={"error": str(e)})
        return ReadinessCheck(name="storage", status="error", error=str(e))

    logger.debug("Storage reachable", extra={"bucket_count": bucket_count})
    return ReadinessCheck(name="storage", status="ok")


@router.get(
    "",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Returns 200 while the process is running. Touches no dependencies.",
)
async def health_check(settings: SettingsDep) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        details={"r2_mock_mode": settings.r2_mock_mode},
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Returns 200 when configuration is complete and storage answers, 503 otherwise.",
    responses={503: {"description": "Service not ready", "model": ReadinessResponse}},
)
def readiness_check(
    response: Response,
    settings: SettingsDep,
    storage: StorageClientDep,
) -> ReadinessResponse:
    checks = [_check_configuration(settings), _check_storage(storage)]
    ready = all(check.status == "ok" for check in checks)

    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning(
            "Readiness check failed",
            extra={"failed": [c.name for c in checks if c.status != "ok"]},
        )

    return ReadinessResponse(
        status="ready" if ready else "not_ready",
        version=__version__,
        checks=checks,
    )
