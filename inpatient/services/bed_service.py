"""
Bed service.
Registration and maintenance of the beds of each ward.
"""
from typing import Optional, List, Tuple
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session
import logging

from inpatient.config import settings
from inpatient.models.bed import Bed
from inpatient.models.enums import BedTypeEnum
from inpatient.repositories.bed_repo import BedRepository
from inpatient.repositories.ward_repo import WardRepository
from inpatient.repositories.admission_repo import AdmissionRepository
from inpatient.schemas.bed import BedCreate, BedUpdate
from inpatient.core.exceptions import (
    ValidationError,
    BedNotFoundError,
    ConflictError,
    ConflictKind,
)
from inpatient.core.locks import KeyedLockRegistry, allocation_locks, ward_key, bed_key
from inpatient.utils.helpers import utcnow

logger = logging.getLogger("inpatient.beds")


class BedService:
    """
    Pool of beds.

    Occupancy is never changed here: only the allocation service claims and
    releases beds.
    """

    def __init__(self, session: Session, locks: Optional[KeyedLockRegistry] = None):
        self.session = session
        self.locks = locks or allocation_locks
        self.bed_repo = BedRepository(session)
        self.ward_repo = WardRepository(session)
        self.admission_repo = AdmissionRepository(session)

    def get_bed(self, bed_id: str) -> Bed:
        bed = self.bed_repo.get_by_id(bed_id)
        if not bed:
            raise BedNotFoundError(bed_id)
        return bed

    def list_beds(
        self,
        ward_id: Optional[str] = None,
        bed_type: Optional[BedTypeEnum] = None,
        is_occupied: Optional[bool] = None,
        is_active: Optional[bool] = None,
        page: int = 1,
        limit: int = None
    ) -> Tuple[List[Bed], int]:
        return self.bed_repo.search(
            ward_id=ward_id,
            bed_type=bed_type,
            is_occupied=is_occupied,
            is_active=is_active,
            page=page,
            limit=limit or settings.DEFAULT_PAGE_SIZE,
        )

    def list_available_beds(
        self,
        ward_id: Optional[str] = None,
        bed_type: Optional[BedTypeEnum] = None
    ) -> List[Bed]:
        """
        Beds that can take a new patient right now.

        Empty for an inactive ward. Without `ward_id` it spans every
        active ward.
        """
        return self.bed_repo.get_available(ward_id=ward_id, bed_type=bed_type)

    def create_bed(self, data: BedCreate) -> Bed:
        """
        Registers a bed in an active ward.

        The ward lock keeps a concurrent ward deletion from missing it.
        Capacity is not checked here, it only bounds occupied beds.

        Raises:
            ValidationError: inactive/unknown ward, empty or duplicated number
        """
        bed_number = (data.bed_number or "").strip()
        if not bed_number:
            raise ValidationError("Bed number is required", fields=["bed_number"])

        with self.locks.hold(ward_key(data.ward_id)):
            ward = self.ward_repo.get_for_update(data.ward_id)
            if not ward or not ward.is_active:
                raise ValidationError(
                    f"Ward '{data.ward_id}' does not exist or is inactive",
                    fields=["ward_id"]
                )

            if self.bed_repo.get_by_number(ward.id, bed_number):
                raise ValidationError(
                    f"Bed number '{bed_number}' already exists in ward {ward.name}",
                    fields=["bed_number"]
                )

            bed = Bed(
                ward_id=ward.id,
                bed_number=bed_number,
                bed_type=data.bed_type,
                notes=data.notes,
            )
            try:
                self.bed_repo.save(bed)
            except IntegrityError as e:
                self.session.rollback()
                raise ValidationError(
                    f"Bed number '{bed_number}' already exists in ward {ward.name}",
                    fields=["bed_number"]
                ) from e

        logger.info(f"Bed created: {ward.name}/{bed.bed_number} ({bed.bed_type.value})")
        return bed

    def update_bed(self, bed_id: str, data: BedUpdate) -> Bed:
        """
        Updates number, type, notes or active flag of a bed.

        Raises:
            BedNotFoundError: unknown bed
            ValidationError: empty or duplicated number
            ConflictError: deactivating an occupied bed
        """
        changes = data.model_dump(exclude_unset=True)

        with self.locks.hold(bed_key(bed_id)):
            bed = self.bed_repo.get_for_update(bed_id)
            if not bed:
                raise BedNotFoundError(bed_id)

            if "bed_number" in changes:
                bed_number = (changes["bed_number"] or "").strip()
                if not bed_number:
                    raise ValidationError("Bed number is required", fields=["bed_number"])
                if self.bed_repo.get_by_number(bed.ward_id, bed_number, exclude_id=bed.id):
                    raise ValidationError(
                        f"Bed number '{bed_number}' already exists in this ward",
                        fields=["bed_number"]
                    )
                changes["bed_number"] = bed_number

            if changes.get("is_active") is False and bed.is_occupied:
                raise ConflictError(
                    ConflictKind.BED_IN_USE,
                    "Cannot deactivate an occupied bed",
                    {"bedId": bed.id}
                )

            if "notes" in changes and changes["notes"] is None:
                bed.notes = None
            changes["updated_at"] = utcnow()

            try:
                self.bed_repo.update_from_dict(bed, changes)
            except IntegrityError as e:
                self.session.rollback()
                raise ValidationError("Bed number already in use", fields=["bed_number"]) from e

        logger.info(f"Bed updated: {bed.id} ({', '.join(sorted(changes))})")
        return bed

    def delete_bed(self, bed_id: str) -> None:
        """
        Deletes a bed that has never held a patient.

        Raises:
            BedNotFoundError: unknown bed
            ConflictError: bed occupied or referenced by admissions
        """
        with self.locks.hold(bed_key(bed_id)):
            bed = self.bed_repo.get_for_update(bed_id)
            if not bed:
                raise BedNotFoundError(bed_id)

            active = self.admission_repo.count_for_bed(bed.id, active_only=True)
            if bed.is_occupied or active:
                logger.warning(f"Bed deletion refused for {bed.id}: occupied")
                raise ConflictError(
                    ConflictKind.BED_IN_USE,
                    "Cannot delete an occupied bed",
                    {"bedId": bed.id, "activeAdmissions": active}
                )

            history = self.admission_repo.count_for_bed(bed.id)
            if history:
                raise ConflictError(
                    ConflictKind.BED_IN_USE,
                    "Bed has admission history; deactivate it instead",
                    {"bedId": bed.id, "activeAdmissions": 0, "allAdmissions": history}
                )

            self.bed_repo.delete(bed)

        logger.info(f"Bed deleted: {bed_id}")


BedPool = BedService
