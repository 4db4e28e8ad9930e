# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""System endpoints: health, readiness, metrics."""
from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from hackreg.core.config import settings
from hackreg.core.dependencies import get_registration_repo

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check():
    return {"status": "ok", "service": settings.SERVICE_NAME, "version": settings.SERVICE_VERSION}


@router.get("/health/ready")
def readiness_check():
    repo = get_registration_repo()
    try:
        repo.verify_connection()
        return {
            "status": "ok",
            "database": "connected",
            "teams": repo.count_teams(),
            "members": repo.count_members(),
        }
    except Exception as exc:
        return JSONResponse(
            status_code=503,
            content={"status": "degraded", "service": settings.SERVICE_NAME, "detail": str(exc)},
        )


@router.get("/metrics")
def prometheus_metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
