"""
Health Check Routes - liveness and readiness probes.

/health answers as long as the process serves requests. /health/ready
also checks the database and answers 503 when it is unreachable, so a
load balancer stops routing to this instance.
"""
from fastapi import APIRouter, Depends, Response, status

from winereview import __version__
from winereview.api.dependencies import get_database
from winereview.core.logging_config import get_logger
from winereview.database.connection import DatabaseConnection
from winereview.models.common import HealthResponse

logger = get_logger(__name__)

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


@router.get("", response_model=HealthResponse, response_model_exclude_none=True, summary="Liveness check")
async def health_check() -> HealthResponse:
    logger.debug("Health check requested")
    return HealthResponse(status="healthy", version=__version__)


@router.get(
    "/ready",
    response_model=HealthResponse,
    summary="Readiness check",
    responses={503: {"model": HealthResponse, "description": "Database unreachable"}},
)
def readiness_check(response: Response, database: DatabaseConnection = Depends(get_database)) -> HealthResponse:
    """Verifies that the database accepts connections."""
    if database.check_connection():
        return HealthResponse(status="ready", version=__version__, database="connected")

    logger.error("Readiness check failed: database unreachable")
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(status="unavailable", version=__version__, database="unreachable")
