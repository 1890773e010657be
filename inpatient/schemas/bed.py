"""
Bed schemas.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from inpatient.models.enums import BedTypeEnum
from inpatient.schemas.responses import PaginationInfo


class BedCreate(BaseModel):
    """Schema to register a bed in a ward."""
    ward_id: str
    bed_number: str = Field(..., max_length=20)
    bed_type: BedTypeEnum = BedTypeEnum.GENERAL
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator('bed_number')
    @classmethod
    def strip_number(cls, v):
        return v.strip()


class BedUpdate(BaseModel):
    """
    Schema to update a bed.

    Occupancy and ward are not editable: occupancy belongs to the
    allocation service and a bed never moves between wards.
    """
    bed_number: Optional[str] = Field(None, max_length=20)
    bed_type: Optional[BedTypeEnum] = None
    notes: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None

    class Config:
        extra = "forbid"

    @field_validator('bed_number')
    @classmethod
    def strip_number(cls, v):
        return v.strip() if v is not None else v


class BedResponse(BaseModel):
    """Bed response schema."""

    id: str
    ward_id: str
    bed_number: str
    bed_type: BedTypeEnum
    is_occupied: bool
    is_active: bool
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    ward_name: Optional[str] = None

    class Config:
        from_attributes = True


class BedListResponse(BaseModel):
    """Page of beds."""
    items: List[BedResponse]
    pagination: PaginationInfo
