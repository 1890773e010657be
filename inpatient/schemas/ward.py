"""
Ward schemas.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from inpatient.models.enums import WardTypeEnum
from inpatient.schemas.responses import PaginationInfo


class WardCreate(BaseModel):
    """Schema to create a ward."""

    name: str = Field(..., min_length=1, max_length=100)
    type: WardTypeEnum = WardTypeEnum.GENERAL
    capacity: int
    floor: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    daily_rate: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)

    # Create `capacity` beds numbered 1..capacity together with the ward
    provision_beds: bool = False

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        return v.strip()


class WardUpdate(BaseModel):
    """Schema to update a ward. Only the given fields change."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[WardTypeEnum] = None
    capacity: Optional[int] = None
    floor: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    daily_rate: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        return v.strip() if v is not None else v


class WardResponse(BaseModel):
    """Ward response schema."""

    id: str
    name: str
    type: WardTypeEnum
    capacity: int
    floor: Optional[str]
    description: Optional[str]
    daily_rate: Optional[Decimal]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    # Derived
    effective_daily_rate: Optional[float] = None
    occupied_beds: int = 0
    total_beds: int = 0

    class Config:
        from_attributes = True


class WardListResponse(BaseModel):
    """Page of wards."""
    items: List[WardResponse]
    pagination: PaginationInfo
