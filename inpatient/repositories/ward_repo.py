"""
Ward repository.
"""
from typing import Optional, List, Tuple, Dict
from sqlalchemy import func, or_
from sqlmodel import Session, select

from inpatient.repositories.base import BaseRepository
from inpatient.models.ward import Ward
from inpatient.models.bed import Bed
from inpatient.models.admission import Admission
from inpatient.models.enums import WardTypeEnum, AdmissionStatusEnum


class WardRepository(BaseRepository[Ward]):
    """Repository for ward operations."""

    def __init__(self, session: Session):
        super().__init__(session, Ward)

    def get_active_by_name(self, name: str, exclude_id: Optional[str] = None) -> Optional[Ward]:
        """
        Returns the active ward with the given name (case-insensitive).

        Args:
            name: Ward name
            exclude_id: Ward to ignore (the one being renamed)
        """
        query = select(Ward).where(
            func.lower(Ward.name) == name.strip().lower(),
            Ward.is_active == True  # noqa: E712
        )
        if exclude_id:
            query = query.where(Ward.id != exclude_id)
        return self.session.exec(query).first()

    def search(
        self,
        search: Optional[str] = None,
        ward_type: Optional[WardTypeEnum] = None,
        is_active: Optional[bool] = None,
        page: int = 1,
        limit: int = 20
    ) -> Tuple[List[Ward], int]:
        """
        Lists wards with filters and pagination, newest first.

        Returns:
            Tuple (wards of the page, total matching)
        """
        query = select(Ward)

        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(or_(
                func.lower(Ward.name).like(pattern),
                func.lower(Ward.description).like(pattern),
                func.lower(Ward.floor).like(pattern),
            ))
        if ward_type is not None:
            query = query.where(Ward.type == ward_type)
        if is_active is not None:
            query = query.where(Ward.is_active == is_active)

        query = query.order_by(Ward.created_at.desc(), Ward.name)
        return self.paginate(query, page, limit)

    def count_occupied_beds(self, ward_id: str) -> int:
        query = select(func.count()).select_from(Bed).where(
            Bed.ward_id == ward_id,
            Bed.is_occupied == True  # noqa: E712
        )
        return self.session.exec(query).one()

    def count_beds(self, ward_id: str) -> int:
        query = select(func.count()).select_from(Bed).where(Bed.ward_id == ward_id)
        return self.session.exec(query).one()

    def count_admissions(self, ward_id: str, active_only: bool = False) -> int:
        query = select(func.count()).select_from(Admission).where(
            Admission.ward_id == ward_id
        )
        if active_only:
            query = query.where(Admission.status == AdmissionStatusEnum.ADMITTED)
        return self.session.exec(query).one()

    def usage_counts(self, ward_id: str) -> Dict[str, int]:
        """
        Counts everything that references the ward.

        Returns:
            Dictionary with active/total admissions and occupied/total beds
        """
        return {
            "activeAdmissions": self.count_admissions(ward_id, active_only=True),
            "allAdmissions": self.count_admissions(ward_id),
            "occupiedBeds": self.count_occupied_beds(ward_id),
            "totalBeds": self.count_beds(ward_id),
        }

    def occupied_beds_by_ward(self) -> Dict[str, int]:
        """Occupied bed count keyed by ward id (wards without any are absent)."""
        query = (
            select(Bed.ward_id, func.count())
            .where(Bed.is_occupied == True)  # noqa: E712
            .group_by(Bed.ward_id)
        )
        return {ward_id: count for ward_id, count in self.session.exec(query).all()}

    def count_by_type(self) -> Dict[str, int]:
        query = select(Ward.type, func.count()).group_by(Ward.type)
        counts = {ward_type.value: 0 for ward_type in WardTypeEnum}
        for ward_type, count in self.session.exec(query).all():
            counts[WardTypeEnum(ward_type).value] = count
        return counts

    def count_active(self) -> int:
        query = select(func.count()).select_from(Ward).where(Ward.is_active == True)  # noqa: E712
        return self.session.exec(query).one()

    def total_capacity(self) -> int:
        return self.session.exec(select(func.coalesce(func.sum(Ward.capacity), 0))).one()
