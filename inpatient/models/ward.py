"""
Ward model.
"""
from sqlalchemy import Index, text
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal
import uuid

from inpatient.models.enums import WardTypeEnum
from inpatient.models.types import UTCDateTime
from inpatient.utils.helpers import utcnow

if TYPE_CHECKING:
    from inpatient.models.bed import Bed
    from inpatient.models.admission import Admission


class Ward(SQLModel, table=True):
    """
    Ward model.

    An organizational unit with a clinical type and a capacity that bounds
    how many of its beds may be occupied at the same time. The number of
    registered beds is tracked independently from the capacity.
    """
    __tablename__ = "ward"
    __table_args__ = (
        # Names are unique among active wards only
        Index(
            "uq_ward_active_name",
            "name",
            unique=True,
            sqlite_where=text("is_active"),
            postgresql_where=text("is_active"),
        ),
    )

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(max_length=100, index=True)
    type: WardTypeEnum = Field(default=WardTypeEnum.GENERAL, index=True)
    capacity: int
    floor: Optional[str] = Field(default=None, max_length=50)
    description: Optional[str] = Field(default=None, max_length=500)
    daily_rate: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    # Relationships
    beds: List["Bed"] = Relationship(back_populates="ward")
    admissions: List["Admission"] = Relationship(back_populates="ward")

    def __repr__(self) -> str:
        return f"Ward(id={self.id}, name={self.name}, capacity={self.capacity})"

    @property
    def occupied_beds(self) -> int:
        """Number of beds of this ward currently flagged as occupied."""
        return sum(1 for bed in self.beds if bed.is_occupied)

    @property
    def has_free_capacity(self) -> bool:
        return self.occupied_beds < self.capacity
