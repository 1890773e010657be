"""
Bed endpoints.
"""
from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session
from typing import List, Optional

from inpatient.config import settings
from inpatient.core.database import get_session
from inpatient.core.websocket_manager import manager
from inpatient.models.bed import Bed
from inpatient.models.enums import BedTypeEnum
from inpatient.schemas.bed import BedCreate, BedUpdate, BedResponse, BedListResponse
from inpatient.schemas.responses import MessageResponse
from inpatient.services.bed_service import BedService
from inpatient.utils.helpers import pagination_info

router = APIRouter()


def build_bed_response(bed: Bed) -> BedResponse:
    response = BedResponse.model_validate(bed)
    response.ward_name = bed.ward.name if bed.ward else None
    return response


@router.post("", response_model=BedResponse, status_code=201)
async def create_bed(data: BedCreate, session: Session = Depends(get_session)):
    """Registers a bed in a ward."""
    response = await run_in_threadpool(
        lambda: build_bed_response(BedService(session).create_bed(data))
    )

    await manager.broadcast({
        "type": "bed_updated",
        "bed_id": response.id,
        "ward_id": response.ward_id,
    })

    return response


@router.get("", response_model=BedListResponse)
def list_beds(
    ward_id: Optional[str] = None,
    bed_type: Optional[BedTypeEnum] = None,
    is_occupied: Optional[bool] = None,
    is_active: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    session: Session = Depends(get_session)
):
    """Lists beds with filters and pagination."""
    beds, total = BedService(session).list_beds(
        ward_id=ward_id,
        bed_type=bed_type,
        is_occupied=is_occupied,
        is_active=is_active,
        page=page,
        limit=limit,
    )
    return BedListResponse(
        items=[build_bed_response(b) for b in beds],
        pagination=pagination_info(page, limit, total),
    )


@router.get("/available", response_model=List[BedResponse])
def list_available_beds(
    ward_id: Optional[str] = None,
    bed_type: Optional[BedTypeEnum] = None,
    session: Session = Depends(get_session)
):
    """Free beds of active wards, optionally of one ward or bed type."""
    beds = BedService(session).list_available_beds(ward_id=ward_id, bed_type=bed_type)
    return [build_bed_response(b) for b in beds]


@router.get("/{bed_id}", response_model=BedResponse)
def get_bed(bed_id: str, session: Session = Depends(get_session)):
    """Returns a bed."""
    return build_bed_response(BedService(session).get_bed(bed_id))


@router.put("/{bed_id}", response_model=BedResponse)
async def update_bed(
    bed_id: str,
    data: BedUpdate,
    session: Session = Depends(get_session)
):
    """Updates number, type, notes or active flag of a bed."""
    response = await run_in_threadpool(
        lambda: build_bed_response(BedService(session).update_bed(bed_id, data))
    )

    await manager.broadcast({
        "type": "bed_updated",
        "bed_id": response.id,
        "ward_id": response.ward_id,
    })

    return response


@router.delete("/{bed_id}", response_model=MessageResponse)
async def delete_bed(bed_id: str, session: Session = Depends(get_session)):
    """Deletes a bed without admissions."""
    await run_in_threadpool(BedService(session).delete_bed, bed_id)

    await manager.broadcast({
        "type": "bed_updated",
        "bed_id": bed_id,
        "deleted": True,
    })

    return MessageResponse(success=True, message="Bed deleted successfully")
