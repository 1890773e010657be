"""
Ward endpoints.
"""
from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session
from typing import Optional

from inpatient.config import settings
from inpatient.core.database import get_session
from inpatient.core.websocket_manager import manager
from inpatient.models.ward import Ward
from inpatient.models.enums import WardTypeEnum
from inpatient.schemas.ward import WardCreate, WardUpdate, WardResponse, WardListResponse
from inpatient.schemas.responses import MessageResponse
from inpatient.services.ward_service import WardService
from inpatient.utils.helpers import pagination_info

router = APIRouter()


def build_ward_response(ward: Ward, service: WardService) -> WardResponse:
    response = WardResponse.model_validate(ward)
    response.effective_daily_rate = service.effective_daily_rate(ward)
    summary = service.bed_summary(ward)
    response.occupied_beds = summary["occupied_beds"]
    response.total_beds = summary["total_beds"]
    return response


@router.post("", response_model=WardResponse, status_code=201)
async def create_ward(data: WardCreate, session: Session = Depends(get_session)):
    """Creates a ward, optionally with its beds."""
    service = WardService(session)

    def create() -> WardResponse:
        return build_ward_response(service.create_ward(data), service)

    response = await run_in_threadpool(create)

    await manager.broadcast({
        "type": "ward_created",
        "ward_id": response.id,
    })

    return response


@router.get("", response_model=WardListResponse)
def list_wards(
    search: Optional[str] = None,
    type: Optional[WardTypeEnum] = None,
    is_active: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    session: Session = Depends(get_session)
):
    """Lists wards with filters and pagination."""
    service = WardService(session)
    wards, total = service.list_wards(
        search=search,
        ward_type=type,
        is_active=is_active,
        page=page,
        limit=limit,
    )
    return WardListResponse(
        items=[build_ward_response(w, service) for w in wards],
        pagination=pagination_info(page, limit, total),
    )


@router.get("/{ward_id}", response_model=WardResponse)
def get_ward(ward_id: str, session: Session = Depends(get_session)):
    """Returns a ward with its bed counts."""
    service = WardService(session)
    return build_ward_response(service.get_ward(ward_id), service)


@router.put("/{ward_id}", response_model=WardResponse)
def update_ward(
    ward_id: str,
    data: WardUpdate,
    session: Session = Depends(get_session)
):
    """Updates a ward."""
    service = WardService(session)
    ward = service.update_ward(ward_id, data)
    return build_ward_response(ward, service)


@router.post("/{ward_id}/activate", response_model=WardResponse)
def activate_ward(ward_id: str, session: Session = Depends(get_session)):
    """Reactivates a ward."""
    service = WardService(session)
    return build_ward_response(service.activate_ward(ward_id), service)


@router.post("/{ward_id}/deactivate", response_model=WardResponse)
def deactivate_ward(ward_id: str, session: Session = Depends(get_session)):
    """Deactivates a ward. Its patients stay where they are."""
    service = WardService(session)
    return build_ward_response(service.deactivate_ward(ward_id), service)


@router.delete("/{ward_id}", response_model=MessageResponse)
async def delete_ward(
    ward_id: str,
    force: bool = False,
    session: Session = Depends(get_session)
):
    """
    Deletes a ward with its beds and admission history.

    A ward with admitted patients needs `force=true`.
    """
    service = WardService(session)
    usage = await run_in_threadpool(service.delete_ward, ward_id, force=force)

    await manager.broadcast({
        "type": "ward_deleted",
        "ward_id": ward_id,
    })

    return MessageResponse(
        success=True,
        message="Ward deleted successfully",
        data={"deleted": usage},
    )
