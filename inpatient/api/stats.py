"""
Statistics endpoints.
"""
from fastapi import APIRouter, Depends
from sqlmodel import Session
from typing import List

from inpatient.core.database import get_session
from inpatient.schemas.stats import (
    WardOccupancyResponse,
    WardStatsResponse,
    BedStatsResponse,
    AdmissionStatsResponse,
)
from inpatient.services.occupancy_service import OccupancyService

router = APIRouter()


@router.get("/wards", response_model=WardStatsResponse)
def get_ward_stats(session: Session = Depends(get_session)):
    """Global ward figures."""
    return OccupancyService(session).ward_stats()


@router.get("/wards/occupancy", response_model=List[WardOccupancyResponse])
def get_ward_occupancy(session: Session = Depends(get_session)):
    """Occupancy rate and band of every ward."""
    return OccupancyService(session).ward_occupancy()


@router.get("/beds", response_model=BedStatsResponse)
def get_bed_stats(session: Session = Depends(get_session)):
    return OccupancyService(session).bed_stats()


@router.get("/admissions", response_model=AdmissionStatsResponse)
def get_admission_stats(session: Session = Depends(get_session)):
    """Admission counts, discharges of today and average stay."""
    return OccupancyService(session).admission_stats()
