"""
Main router grouping every sub-router.
"""
from fastapi import APIRouter

from inpatient.api import health
from inpatient.api import wards
from inpatient.api import beds
from inpatient.api import admissions
from inpatient.api import stats
from inpatient.api import websocket

api_router = APIRouter()

# ============================================
# INCLUDE ALL ROUTERS
# ============================================

api_router.include_router(health.router)

api_router.include_router(
    wards.router,
    prefix="/wards",
    tags=["Wards"]
)

api_router.include_router(
    beds.router,
    prefix="/beds",
    tags=["Beds"]
)

api_router.include_router(
    admissions.router,
    prefix="/admissions",
    tags=["Admissions"]
)

api_router.include_router(
    stats.router,
    prefix="/stats",
    tags=["Statistics"]
)

api_router.include_router(
    websocket.router,
    tags=["WebSocket"]
)
