"""
Admission repository.
"""
from typing import Optional, List, Tuple, Dict
from datetime import datetime
from sqlalchemy import func, or_
from sqlmodel import Session, select

from inpatient.repositories.base import BaseRepository
from inpatient.models.admission import Admission
from inpatient.models.enums import AdmissionStatusEnum, AdmissionTypeEnum


class AdmissionRepository(BaseRepository[Admission]):
    """Repository for admission queries."""

    def __init__(self, session: Session):
        super().__init__(session, Admission)

    def get_active_for_patient(self, patient_id: str) -> Optional[Admission]:
        """
        Returns the patient's ADMITTED admission, if any.

        Always reads from the database so it can be used inside the
        allocation critical section.
        """
        query = (
            select(Admission)
            .where(
                Admission.patient_id == patient_id,
                Admission.status == AdmissionStatusEnum.ADMITTED
            )
            .execution_options(populate_existing=True)
        )
        return self.session.exec(query).first()

    def get_current(self, ward_id: Optional[str] = None) -> List[Admission]:
        """
        Returns every ADMITTED admission, most recent admission first.

        Args:
            ward_id: Restrict to one ward
        """
        query = select(Admission).where(Admission.status == AdmissionStatusEnum.ADMITTED)
        if ward_id:
            query = query.where(Admission.ward_id == ward_id)
        query = query.order_by(Admission.admission_date.desc())
        return list(self.session.exec(query).all())

    def search(
        self,
        ward_id: Optional[str] = None,
        status: Optional[AdmissionStatusEnum] = None,
        admission_type: Optional[AdmissionTypeEnum] = None,
        patient_id: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20
    ) -> Tuple[List[Admission], int]:
        """
        Lists admissions with filters and pagination, newest first.

        `search` matches the admission reason and notes.
        """
        query = select(Admission)

        if ward_id:
            query = query.where(Admission.ward_id == ward_id)
        if status is not None:
            query = query.where(Admission.status == status)
        if admission_type is not None:
            query = query.where(Admission.admission_type == admission_type)
        if patient_id:
            query = query.where(Admission.patient_id == patient_id)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(or_(
                func.lower(Admission.admission_reason).like(pattern),
                func.lower(Admission.notes).like(pattern),
            ))

        query = query.order_by(Admission.created_at.desc(), Admission.id)
        return self.paginate(query, page, limit)

    def count_for_bed(self, bed_id: str, active_only: bool = False) -> int:
        query = select(func.count()).select_from(Admission).where(Admission.bed_id == bed_id)
        if active_only:
            query = query.where(Admission.status == AdmissionStatusEnum.ADMITTED)
        return self.session.exec(query).one()

    def count_by_status(self) -> Dict[str, int]:
        query = select(Admission.status, func.count()).group_by(Admission.status)
        counts = {status.value: 0 for status in AdmissionStatusEnum}
        for status, count in self.session.exec(query).all():
            counts[AdmissionStatusEnum(status).value] = count
        return counts

    def count_by_type(self) -> Dict[str, int]:
        query = select(Admission.admission_type, func.count()).group_by(Admission.admission_type)
        counts = {admission_type.value: 0 for admission_type in AdmissionTypeEnum}
        for admission_type, count in self.session.exec(query).all():
            counts[AdmissionTypeEnum(admission_type).value] = count
        return counts

    def count_current_by_ward(self) -> Dict[str, int]:
        query = (
            select(Admission.ward_id, func.count())
            .where(Admission.status == AdmissionStatusEnum.ADMITTED)
            .group_by(Admission.ward_id)
        )
        return {ward_id: count for ward_id, count in self.session.exec(query).all()}

    def count_discharged_between(self, start: datetime, end: datetime) -> int:
        """Counts DISCHARGED admissions with discharge_date in [start, end)."""
        query = select(func.count()).select_from(Admission).where(
            Admission.status == AdmissionStatusEnum.DISCHARGED,
            Admission.discharge_date >= start,
            Admission.discharge_date < end,
        )
        return self.session.exec(query).one()

    def get_closed_stays(self) -> List[Tuple[datetime, datetime]]:
        """(admission_date, discharge_date) of every DISCHARGED admission."""
        query = select(Admission.admission_date, Admission.discharge_date).where(
            Admission.status == AdmissionStatusEnum.DISCHARGED,
            Admission.discharge_date.is_not(None),
        )
        return list(self.session.exec(query).all())

    def delete_by_ward(self, ward_id: str) -> int:
        """
        Deletes every admission of a ward (any status) without committing.

        Returns:
            Number of deleted admissions
        """
        admissions = self.session.exec(
            select(Admission).where(Admission.ward_id == ward_id)
        ).all()
        for admission in admissions:
            self.session.delete(admission)
        self.session.flush()
        return len(admissions)
