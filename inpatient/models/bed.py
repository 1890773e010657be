"""
Bed model.
"""
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
import uuid

from inpatient.models.enums import BedTypeEnum
from inpatient.models.types import UTCDateTime
from inpatient.utils.helpers import utcnow

if TYPE_CHECKING:
    from inpatient.models.ward import Ward
    from inpatient.models.admission import Admission


class Bed(SQLModel, table=True):
    """
    Hospital bed model.

    The allocatable unit inside a ward. `is_occupied` is only ever changed
    by the allocation service, together with the admission that claims or
    releases the bed.
    """
    __tablename__ = "bed"
    __table_args__ = (
        UniqueConstraint("ward_id", "bed_number", name="uq_bed_ward_number"),
    )

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        primary_key=True
    )
    ward_id: str = Field(foreign_key="ward.id", index=True)
    bed_number: str = Field(max_length=20)
    bed_type: BedTypeEnum = Field(default=BedTypeEnum.GENERAL, index=True)
    is_occupied: bool = Field(default=False, index=True)
    is_active: bool = Field(default=True, index=True)
    notes: Optional[str] = Field(default=None, max_length=500)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    # Relationships
    ward: "Ward" = Relationship(back_populates="beds")
    admissions: List["Admission"] = Relationship(back_populates="bed")

    def __repr__(self) -> str:
        return f"Bed(id={self.id}, number={self.bed_number}, occupied={self.is_occupied})"

    @property
    def is_available(self) -> bool:
        """Whether the bed can receive a new patient."""
        return self.is_active and not self.is_occupied
