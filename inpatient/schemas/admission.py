"""
Admission schemas.

Admission requests are a tagged variant on `admission_type`: day care
admissions carry extra procedure fields that the other types do not have.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Annotated, Optional, List, Union, Literal
from datetime import datetime

from inpatient.models.enums import AdmissionTypeEnum, AdmissionStatusEnum
from inpatient.schemas.responses import PaginationInfo
from inpatient.utils.helpers import to_utc


# ============================================
# REQUESTS
# ============================================

class _AdmissionRequestBase(BaseModel):
    """Fields shared by every admission request."""

    patient_id: str = Field(..., min_length=1)
    ward_id: str = Field(..., min_length=1)
    bed_id: str = Field(..., min_length=1)
    admission_date: Optional[datetime] = None
    admission_reason: str = Field("", max_length=500)
    notes: Optional[str] = Field(None, max_length=1000)

    @field_validator('admission_date')
    @classmethod
    def normalize_admission_date(cls, v):
        return to_utc(v)


class StandardAdmissionRequest(_AdmissionRequestBase):
    """Emergency, planned, transfer or observation admission."""
    admission_type: Literal["EMERGENCY", "PLANNED", "TRANSFER", "OBSERVATION"]


class DayCareAdmissionRequest(_AdmissionRequestBase):
    """
    Day care admission.

    The procedure fields are declared optional so that the allocation
    service can report every missing one at once.
    """
    admission_type: Literal["DAY_CARE"]
    procedure_start_time: Optional[datetime] = None
    expected_discharge_time: Optional[datetime] = None
    home_support_available: Optional[bool] = None

    @field_validator('procedure_start_time', 'expected_discharge_time')
    @classmethod
    def normalize_times(cls, v):
        return to_utc(v)


AdmissionRequest = Annotated[
    Union[StandardAdmissionRequest, DayCareAdmissionRequest],
    Field(discriminator="admission_type"),
]


class AdmissionUpdate(BaseModel):
    """Editable details of an active admission."""
    admission_reason: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, max_length=1000)

    class Config:
        extra = "forbid"


class DischargeRequest(BaseModel):
    """Request to discharge an admission."""
    discharge_notes: Optional[str] = Field(None, max_length=1000)


class TransferRequest(BaseModel):
    """Request to move an active admission to another bed."""
    target_ward_id: str = Field(..., min_length=1)
    target_bed_id: str = Field(..., min_length=1)
    reason: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, max_length=1000)


# ============================================
# RESPONSES
# ============================================

class AdmissionResponse(BaseModel):
    """Admission response schema."""

    id: str
    patient_id: str
    ward_id: str
    bed_id: str
    admission_date: datetime
    discharge_date: Optional[datetime]
    admission_type: AdmissionTypeEnum
    status: AdmissionStatusEnum
    admission_reason: str
    notes: Optional[str]
    discharge_notes: Optional[str]
    transferred_from_id: Optional[str]

    is_day_care: bool
    procedure_start_time: Optional[datetime]
    expected_discharge_time: Optional[datetime]
    home_support_available: Optional[bool]

    length_of_stay_days: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AdmissionListResponse(BaseModel):
    """Page of admissions."""
    items: List[AdmissionResponse]
    pagination: PaginationInfo


class TransferResponse(BaseModel):
    """Both sides of a transfer."""
    previous: AdmissionResponse
    current: AdmissionResponse
