"""
System data models.
Re-exports every model for simpler imports.
"""
from inpatient.models.enums import (
    WardTypeEnum,
    BedTypeEnum,
    AdmissionTypeEnum,
    AdmissionStatusEnum,
    OccupancyBandEnum,
)

from inpatient.models.ward import Ward
from inpatient.models.bed import Bed
from inpatient.models.admission import Admission

__all__ = [
    # Enums
    "WardTypeEnum",
    "BedTypeEnum",
    "AdmissionTypeEnum",
    "AdmissionStatusEnum",
    "OccupancyBandEnum",
    # Models
    "Ward",
    "Bed",
    "Admission",
]
