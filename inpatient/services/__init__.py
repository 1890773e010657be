"""
Business services.
Hold the allocation rules of the system.
"""
from inpatient.services.ward_service import WardService, WardRegistry
from inpatient.services.bed_service import BedService, BedPool
from inpatient.services.admission_ledger import AdmissionLedger
from inpatient.services.allocation_service import AllocationService, AllocationCoordinator
from inpatient.services.occupancy_service import (
    OccupancyService,
    OccupancyAggregator,
    occupancy_band,
)
from inpatient.services.patient_directory import (
    PatientDirectory,
    AcceptAllPatientDirectory,
    StaticPatientDirectory,
)

__all__ = [
    "WardService",
    "WardRegistry",
    "BedService",
    "BedPool",
    "AdmissionLedger",
    "AllocationService",
    "AllocationCoordinator",
    "OccupancyService",
    "OccupancyAggregator",
    "occupancy_band",
    "PatientDirectory",
    "AcceptAllPatientDirectory",
    "StaticPatientDirectory",
]
