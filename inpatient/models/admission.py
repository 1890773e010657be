"""
Admission model.
"""
from sqlalchemy import Index, text
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from datetime import datetime
import uuid

from inpatient.models.enums import AdmissionTypeEnum, AdmissionStatusEnum
from inpatient.models.types import UTCDateTime
from inpatient.utils.helpers import utcnow

if TYPE_CHECKING:
    from inpatient.models.ward import Ward
    from inpatient.models.bed import Bed


_ACTIVE = "status = 'ADMITTED'"


class Admission(SQLModel, table=True):
    """
    Admission model.

    One stay of a patient in one bed. Created only by the allocation
    service, moves once from ADMITTED to DISCHARGED or TRANSFERRED and is
    kept afterwards as the audit trail of the bed.
    """
    __tablename__ = "admission"
    __table_args__ = (
        # At most one active admission per bed and per patient
        Index(
            "uq_admission_active_bed",
            "bed_id",
            unique=True,
            sqlite_where=text(_ACTIVE),
            postgresql_where=text(_ACTIVE),
        ),
        Index(
            "uq_admission_active_patient",
            "patient_id",
            unique=True,
            sqlite_where=text(_ACTIVE),
            postgresql_where=text(_ACTIVE),
        ),
    )

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    patient_id: str = Field(index=True)
    ward_id: str = Field(foreign_key="ward.id", index=True)
    bed_id: str = Field(foreign_key="bed.id", index=True)

    admission_date: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, index=True)
    discharge_date: Optional[datetime] = Field(default=None, sa_type=UTCDateTime, index=True)
    admission_type: AdmissionTypeEnum = Field(index=True)
    status: AdmissionStatusEnum = Field(default=AdmissionStatusEnum.ADMITTED, index=True)

    admission_reason: str = Field(max_length=500)
    notes: Optional[str] = Field(default=None, max_length=1000)
    discharge_notes: Optional[str] = Field(default=None, max_length=1000)

    # Admission this one continues when opened by a transfer
    transferred_from_id: Optional[str] = Field(default=None, index=True)

    # Day care only
    procedure_start_time: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    expected_discharge_time: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    home_support_available: Optional[bool] = Field(default=None)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    # Relationships
    ward: "Ward" = Relationship(back_populates="admissions")
    bed: "Bed" = Relationship(back_populates="admissions")

    def __repr__(self) -> str:
        return (
            f"Admission(id={self.id}, patient={self.patient_id}, "
            f"bed={self.bed_id}, status={self.status})"
        )

    @property
    def is_day_care(self) -> bool:
        return self.admission_type == AdmissionTypeEnum.DAY_CARE

    @property
    def is_active(self) -> bool:
        """Whether the admission still holds its bed."""
        return self.status == AdmissionStatusEnum.ADMITTED

    @property
    def length_of_stay_days(self) -> Optional[float]:
        """Stay length in days, only for closed admissions."""
        if self.discharge_date is None:
            return None
        return (self.discharge_date - self.admission_date).total_seconds() / 86400
