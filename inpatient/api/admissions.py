"""
Admission endpoints.
Admission, discharge and transfer go through the allocation service.
Its calls may wait on allocation locks, so they run in the threadpool and
only the broadcast runs on the event loop.
"""
from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session
from typing import List, Optional

from inpatient.config import settings
from inpatient.core.database import get_session
from inpatient.core.websocket_manager import manager
from inpatient.models.enums import AdmissionStatusEnum, AdmissionTypeEnum
from inpatient.schemas.admission import (
    AdmissionRequest,
    AdmissionUpdate,
    DischargeRequest,
    TransferRequest,
    AdmissionResponse,
    AdmissionListResponse,
    TransferResponse,
)
from inpatient.services.admission_ledger import AdmissionLedger
from inpatient.services.allocation_service import AllocationService
from inpatient.utils.helpers import pagination_info

router = APIRouter()


@router.post("", response_model=AdmissionResponse, status_code=201)
async def admit_patient(request: AdmissionRequest, session: Session = Depends(get_session)):
    """
    Admits a patient into a free bed.

    Day care admissions (`admission_type = DAY_CARE`) also need
    procedure_start_time, expected_discharge_time and
    home_support_available = true.
    """
    def admit() -> AdmissionResponse:
        return AdmissionResponse.model_validate(AllocationService(session).admit_patient(request))

    response = await run_in_threadpool(admit)

    await manager.broadcast({
        "type": "admission_created",
        "admission_id": response.id,
        "patient_id": response.patient_id,
        "ward_id": response.ward_id,
        "bed_id": response.bed_id,
    })

    return response


@router.get("", response_model=AdmissionListResponse)
def list_admissions(
    ward_id: Optional[str] = None,
    status: Optional[AdmissionStatusEnum] = None,
    admission_type: Optional[AdmissionTypeEnum] = None,
    patient_id: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    session: Session = Depends(get_session)
):
    """Lists admissions with filters and pagination."""
    admissions, total = AdmissionLedger(session).get_admissions(
        ward_id=ward_id,
        status=status,
        admission_type=admission_type,
        patient_id=patient_id,
        search=search,
        page=page,
        limit=limit,
    )
    return AdmissionListResponse(
        items=[AdmissionResponse.model_validate(a) for a in admissions],
        pagination=pagination_info(page, limit, total),
    )


@router.get("/current", response_model=List[AdmissionResponse])
def list_current_admissions(
    ward_id: Optional[str] = None,
    session: Session = Depends(get_session)
):
    """Patients currently admitted, most recent first."""
    return [
        AdmissionResponse.model_validate(a)
        for a in AdmissionLedger(session).get_current_admissions(ward_id)
    ]


@router.get("/{admission_id}", response_model=AdmissionResponse)
def get_admission(admission_id: str, session: Session = Depends(get_session)):
    """Returns an admission."""
    return AdmissionResponse.model_validate(AdmissionLedger(session).get_admission(admission_id))


@router.put("/{admission_id}", response_model=AdmissionResponse)
def update_admission(
    admission_id: str,
    data: AdmissionUpdate,
    session: Session = Depends(get_session)
):
    """Edits the reason and notes of an active admission."""
    admission = AdmissionLedger(session).update_admission_details(admission_id, data)
    return AdmissionResponse.model_validate(admission)


@router.post("/{admission_id}/discharge", response_model=AdmissionResponse)
async def discharge_patient(
    admission_id: str,
    request: Optional[DischargeRequest] = None,
    session: Session = Depends(get_session)
):
    """Discharges the patient and frees the bed."""
    notes = request.discharge_notes if request else None

    def discharge() -> AdmissionResponse:
        admission = AllocationService(session).discharge_patient(admission_id, notes)
        return AdmissionResponse.model_validate(admission)

    response = await run_in_threadpool(discharge)

    await manager.broadcast({
        "type": "admission_discharged",
        "admission_id": response.id,
        "patient_id": response.patient_id,
        "bed_id": response.bed_id,
    })

    return response


@router.post("/{admission_id}/transfer", response_model=TransferResponse)
async def transfer_patient(
    admission_id: str,
    request: TransferRequest,
    session: Session = Depends(get_session)
):
    """Moves the patient to another bed, closing this admission."""
    def transfer() -> TransferResponse:
        previous, current = AllocationService(session).transfer_patient(
            admission_id,
            request.target_ward_id,
            request.target_bed_id,
            reason=request.reason,
            notes=request.notes,
        )
        return TransferResponse(
            previous=AdmissionResponse.model_validate(previous),
            current=AdmissionResponse.model_validate(current),
        )

    response = await run_in_threadpool(transfer)

    await manager.broadcast({
        "type": "admission_transferred",
        "admission_id": response.current.id,
        "previous_admission_id": response.previous.id,
        "patient_id": response.current.patient_id,
        "from_bed_id": response.previous.bed_id,
        "to_bed_id": response.current.bed_id,
    })

    return response
