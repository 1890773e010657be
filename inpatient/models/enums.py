"""
System enumerations.
Centralized to avoid circular imports.
"""
from enum import Enum


class WardTypeEnum(str, Enum):
    """Clinical type of a ward."""
    GENERAL = "GENERAL"
    ICU = "ICU"
    PRIVATE = "PRIVATE"
    EMERGENCY = "EMERGENCY"
    PEDIATRIC = "PEDIATRIC"
    MATERNITY = "MATERNITY"
    SURGICAL = "SURGICAL"
    CARDIAC = "CARDIAC"
    NEUROLOGY = "NEUROLOGY"
    ORTHOPEDIC = "ORTHOPEDIC"
    DAY_CARE = "DAY_CARE"


class BedTypeEnum(str, Enum):
    """Physical type of a bed."""
    GENERAL = "GENERAL"
    ICU = "ICU"
    PRIVATE = "PRIVATE"
    SEMI_PRIVATE = "SEMI_PRIVATE"
    ISOLATION = "ISOLATION"


class AdmissionTypeEnum(str, Enum):
    """How the patient came to be admitted."""
    EMERGENCY = "EMERGENCY"
    PLANNED = "PLANNED"
    TRANSFER = "TRANSFER"
    OBSERVATION = "OBSERVATION"
    DAY_CARE = "DAY_CARE"


class AdmissionStatusEnum(str, Enum):
    """Admission lifecycle. ADMITTED moves once to a terminal status."""
    ADMITTED = "ADMITTED"
    DISCHARGED = "DISCHARGED"
    TRANSFERRED = "TRANSFERRED"


class OccupancyBandEnum(str, Enum):
    """Load classification of a ward."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


# ============================================
# ENUM RELATED CONSTANTS
# ============================================

TERMINAL_ADMISSION_STATUSES = [
    AdmissionStatusEnum.DISCHARGED,
    AdmissionStatusEnum.TRANSFERRED,
]

# Bed type used when beds are provisioned together with their ward
WARD_TYPE_DEFAULT_BED_TYPE = {
    WardTypeEnum.GENERAL: BedTypeEnum.GENERAL,
    WardTypeEnum.ICU: BedTypeEnum.ICU,
    WardTypeEnum.PRIVATE: BedTypeEnum.PRIVATE,
    WardTypeEnum.EMERGENCY: BedTypeEnum.GENERAL,
    WardTypeEnum.PEDIATRIC: BedTypeEnum.GENERAL,
    WardTypeEnum.MATERNITY: BedTypeEnum.GENERAL,
    WardTypeEnum.SURGICAL: BedTypeEnum.GENERAL,
    WardTypeEnum.CARDIAC: BedTypeEnum.ICU,
    WardTypeEnum.NEUROLOGY: BedTypeEnum.GENERAL,
    WardTypeEnum.ORTHOPEDIC: BedTypeEnum.GENERAL,
    WardTypeEnum.DAY_CARE: BedTypeEnum.GENERAL,
}

# Occupancy band thresholds, highest first (rate in percent)
OCCUPANCY_BAND_THRESHOLDS = [
    (90.0, OccupancyBandEnum.CRITICAL),
    (75.0, OccupancyBandEnum.HIGH),
    (50.0, OccupancyBandEnum.MEDIUM),
]
