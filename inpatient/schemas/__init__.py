"""
Pydantic schemas for validation and serialization.
"""
from inpatient.schemas.ward import (
    WardCreate,
    WardUpdate,
    WardResponse,
    WardListResponse,
)

from inpatient.schemas.bed import (
    BedCreate,
    BedUpdate,
    BedResponse,
    BedListResponse,
)

from inpatient.schemas.admission import (
    StandardAdmissionRequest,
    DayCareAdmissionRequest,
    AdmissionRequest,
    AdmissionUpdate,
    DischargeRequest,
    TransferRequest,
    AdmissionResponse,
    AdmissionListResponse,
    TransferResponse,
)

from inpatient.schemas.stats import (
    WardOccupancyResponse,
    WardStatsResponse,
    BedStatsResponse,
    AdmissionStatsResponse,
)

from inpatient.schemas.responses import (
    MessageResponse,
    ErrorResponse,
    PaginationInfo,
)

__all__ = [
    # Ward
    "WardCreate",
    "WardUpdate",
    "WardResponse",
    "WardListResponse",
    # Bed
    "BedCreate",
    "BedUpdate",
    "BedResponse",
    "BedListResponse",
    # Admission
    "StandardAdmissionRequest",
    "DayCareAdmissionRequest",
    "AdmissionRequest",
    "AdmissionUpdate",
    "DischargeRequest",
    "TransferRequest",
    "AdmissionResponse",
    "AdmissionListResponse",
    "TransferResponse",
    # Stats
    "WardOccupancyResponse",
    "WardStatsResponse",
    "BedStatsResponse",
    "AdmissionStatsResponse",
    # Common
    "MessageResponse",
    "ErrorResponse",
    "PaginationInfo",
]
