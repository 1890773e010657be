"""
Bed repository.
"""
from typing import Optional, List, Tuple, Dict
from sqlalchemy import func
from sqlmodel import Session, select

from inpatient.repositories.base import BaseRepository
from inpatient.models.bed import Bed
from inpatient.models.ward import Ward
from inpatient.models.enums import BedTypeEnum


class BedRepository(BaseRepository[Bed]):
    """Repository for bed operations."""

    def __init__(self, session: Session):
        super().__init__(session, Bed)

    def get_by_number(
        self,
        ward_id: str,
        bed_number: str,
        exclude_id: Optional[str] = None
    ) -> Optional[Bed]:
        """
        Returns the bed with a given number inside a ward.

        Args:
            ward_id: Ward ID
            bed_number: Bed number (e.g. "12" or "A-3")
            exclude_id: Bed to ignore (the one being renumbered)
        """
        query = select(Bed).where(Bed.ward_id == ward_id, Bed.bed_number == bed_number)
        if exclude_id:
            query = query.where(Bed.id != exclude_id)
        return self.session.exec(query).first()

    def get_by_ward(self, ward_id: str) -> List[Bed]:
        """Every bed of a ward, in bed number order."""
        query = (
            select(Bed)
            .where(Bed.ward_id == ward_id)
            .order_by(func.length(Bed.bed_number), Bed.bed_number)
        )
        return list(self.session.exec(query).all())

    def get_ids_by_ward(self, ward_id: str) -> List[str]:
        query = select(Bed.id).where(Bed.ward_id == ward_id)
        return list(self.session.exec(query).all())

    def get_available(
        self,
        ward_id: Optional[str] = None,
        bed_type: Optional[BedTypeEnum] = None
    ) -> List[Bed]:
        """
        Returns the beds that can take a new patient.

        A bed is available when it is active, not occupied and its ward is
        active.

        Args:
            ward_id: Restrict to one ward
            bed_type: Restrict to one bed type

        Returns:
            List of free beds ordered by ward name and bed number
        """
        query = (
            select(Bed)
            .join(Ward)
            .where(
                Bed.is_active == True,  # noqa: E712
                Bed.is_occupied == False,  # noqa: E712
                Ward.is_active == True,  # noqa: E712
            )
        )
        if ward_id:
            query = query.where(Bed.ward_id == ward_id)
        if bed_type is not None:
            query = query.where(Bed.bed_type == bed_type)

        query = query.order_by(Ward.name, func.length(Bed.bed_number), Bed.bed_number)
        return list(self.session.exec(query).all())

    def search(
        self,
        ward_id: Optional[str] = None,
        bed_type: Optional[BedTypeEnum] = None,
        is_occupied: Optional[bool] = None,
        is_active: Optional[bool] = None,
        page: int = 1,
        limit: int = 20
    ) -> Tuple[List[Bed], int]:
        """
        Lists beds with filters and pagination.

        Returns:
            Tuple (beds of the page, total matching)
        """
        query = select(Bed)

        if ward_id:
            query = query.where(Bed.ward_id == ward_id)
        if bed_type is not None:
            query = query.where(Bed.bed_type == bed_type)
        if is_occupied is not None:
            query = query.where(Bed.is_occupied == is_occupied)
        if is_active is not None:
            query = query.where(Bed.is_active == is_active)

        query = query.order_by(Bed.ward_id, func.length(Bed.bed_number), Bed.bed_number)
        return self.paginate(query, page, limit)

    def count_filtered(
        self,
        is_occupied: Optional[bool] = None,
        is_active: Optional[bool] = None
    ) -> int:
        query = select(func.count()).select_from(Bed)
        if is_occupied is not None:
            query = query.where(Bed.is_occupied == is_occupied)
        if is_active is not None:
            query = query.where(Bed.is_active == is_active)
        return self.session.exec(query).one()

    def count_by_type(self) -> Dict[str, int]:
        query = select(Bed.bed_type, func.count()).group_by(Bed.bed_type)
        counts = {bed_type.value: 0 for bed_type in BedTypeEnum}
        for bed_type, count in self.session.exec(query).all():
            counts[BedTypeEnum(bed_type).value] = count
        return counts

    def count_by_ward(self) -> Dict[str, int]:
        """Registered bed count keyed by ward id."""
        query = select(Bed.ward_id, func.count()).group_by(Bed.ward_id)
        return {ward_id: count for ward_id, count in self.session.exec(query).all()}
