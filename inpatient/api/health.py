"""
Health check endpoints.
"""
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlmodel import Session
from datetime import datetime

from inpatient.config import settings
from inpatient.core.database import check_database_health, get_session
from inpatient.core.websocket_manager import manager

router = APIRouter(
    prefix="/health",
    tags=["health"],
    responses={
        200: {"description": "System healthy"},
        503: {"description": "System unavailable"}
    }
)


@router.get(
    "",
    summary="Health Check",
    description="Checks that the application runs and the database answers",
    response_model=None
)
def health_check(session: Session = Depends(get_session)) -> JSONResponse:
    """
    Returns 200 when the application and its database are up, 503 when
    the database does not answer.
    """
    db_health = check_database_health(session.get_bind())
    healthy = db_health.get("healthy", False)

    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "timestamp": datetime.now().isoformat(),
            "version": settings.APP_VERSION,
            "environment": settings.APP_ENV,
            "components": {
                "database": db_health,
                "websocket": {"connections": manager.get_connection_count()},
            },
        }
    )


@router.get(
    "/liveness",
    summary="Liveness Probe",
    description="Checks that the application is alive",
    response_model=None
)
async def liveness_probe() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "alive",
            "timestamp": datetime.now().isoformat()
        }
    )
