"""Health check endpoints. No dependencies; used for liveness and readiness probes."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from passdesk.core.config import get_settings
from passdesk.infrastructure.firebase.client import get_firestore_client
from passdesk.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse(version=get_settings().app_version)


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Firestore not configured", "model": ReadinessResponse}},
)
def readiness_check() -> ReadinessResponse | JSONResponse:
    """Return 200 when the Firestore client is configured, else 503."""
    if get_firestore_client() is not None:
        return ReadinessResponse(firestore=True)
    return JSONResponse(
        status_code=503,
        content=ReadinessResponse(status="not_ready", firestore=False).model_dump(),
    )
