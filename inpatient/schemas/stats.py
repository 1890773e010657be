"""
Statistics schemas.
"""
from pydantic import BaseModel
from typing import Dict

from inpatient.models.enums import WardTypeEnum, OccupancyBandEnum


class WardOccupancyResponse(BaseModel):
    """Occupancy of a single ward."""
    ward_id: str
    name: str
    type: WardTypeEnum
    capacity: int
    occupied: int
    rate: float
    band: OccupancyBandEnum


class WardStatsResponse(BaseModel):
    """Global ward statistics."""
    total_wards: int
    active_wards: int
    wards_by_type: Dict[str, int]
    total_capacity: int
    total_occupancy: int
    available_beds: int
    occupancy_rate: float


class BedStatsResponse(BaseModel):
    """Global bed statistics."""
    total: int
    occupied: int
    available: int
    active: int
    by_type: Dict[str, int]
    by_ward: Dict[str, int]
    occupancy_rate: float


class AdmissionStatsResponse(BaseModel):
    """Global admission statistics."""
    total: int
    current: int
    discharged_today: int
    by_status: Dict[str, int]
    by_type: Dict[str, int]
    by_ward: Dict[str, int]
    average_stay_days: float
