"""
Ward service.
Creation, edition, activation and deletion of wards.
"""
from typing import Optional, List, Tuple, Dict
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session
import logging

from inpatient.config import settings
from inpatient.models.ward import Ward
from inpatient.models.bed import Bed
from inpatient.models.enums import WardTypeEnum, WARD_TYPE_DEFAULT_BED_TYPE
from inpatient.repositories.ward_repo import WardRepository
from inpatient.repositories.bed_repo import BedRepository
from inpatient.repositories.admission_repo import AdmissionRepository
from inpatient.schemas.ward import WardCreate, WardUpdate
from inpatient.core.exceptions import (
    ValidationError,
    WardNotFoundError,
    ConflictError,
    ConflictKind,
)
from inpatient.core.locks import KeyedLockRegistry, allocation_locks, ward_key, bed_key
from inpatient.utils.helpers import utcnow

logger = logging.getLogger("inpatient.wards")


class WardService:
    """
    Registry of wards.

    Handles:
    - Ward creation, optionally with its beds
    - Edition with capacity and name checks
    - Soft deactivation and reactivation
    - Deletion, plain or forced
    """

    def __init__(self, session: Session, locks: Optional[KeyedLockRegistry] = None):
        self.session = session
        self.locks = locks or allocation_locks
        self.ward_repo = WardRepository(session)
        self.bed_repo = BedRepository(session)
        self.admission_repo = AdmissionRepository(session)

    # ============================================
    # QUERIES
    # ============================================

    def get_ward(self, ward_id: str) -> Ward:
        ward = self.ward_repo.get_by_id(ward_id)
        if not ward:
            raise WardNotFoundError(ward_id)
        return ward

    def list_wards(
        self,
        search: Optional[str] = None,
        ward_type: Optional[WardTypeEnum] = None,
        is_active: Optional[bool] = None,
        page: int = 1,
        limit: int = None
    ) -> Tuple[List[Ward], int]:
        """
        Lists wards with filters.

        Returns:
            Tuple (wards of the page, total matching)
        """
        return self.ward_repo.search(
            search=search,
            ward_type=ward_type,
            is_active=is_active,
            page=page,
            limit=limit or settings.DEFAULT_PAGE_SIZE,
        )

    def effective_daily_rate(self, ward: Ward) -> float:
        """Daily rate of the ward, falling back to the default of its type."""
        if ward.daily_rate is not None:
            return float(ward.daily_rate)
        return float(settings.WARD_DEFAULT_DAILY_RATES.get(
            ward.type.value,
            settings.WARD_DEFAULT_DAILY_RATE_FALLBACK,
        ))

    def bed_summary(self, ward: Ward) -> Dict[str, int]:
        return {
            "occupied_beds": self.ward_repo.count_occupied_beds(ward.id),
            "total_beds": self.ward_repo.count_beds(ward.id),
        }

    # ============================================
    # COMMANDS
    # ============================================

    def create_ward(self, data: WardCreate) -> Ward:
        """
        Creates a ward.

        With `provision_beds` the ward is created together with `capacity`
        beds numbered from 1, typed after the ward type.

        Raises:
            ValidationError: invalid capacity or duplicated name
        """
        name = self._validate_name(data.name)
        self._validate_capacity(data.capacity)

        if self.ward_repo.get_active_by_name(name):
            raise ValidationError(f"An active ward named '{name}' already exists", fields=["name"])

        ward = Ward(
            name=name,
            type=data.type,
            capacity=data.capacity,
            floor=data.floor,
            description=data.description,
            daily_rate=data.daily_rate,
        )

        try:
            self.ward_repo.save(ward, commit=False)
            if data.provision_beds:
                bed_type = WARD_TYPE_DEFAULT_BED_TYPE.get(ward.type)
                for number in range(1, ward.capacity + 1):
                    self.session.add(Bed(ward_id=ward.id, bed_number=str(number), bed_type=bed_type))
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Ward creation rejected by the database: {e.orig}")
            raise ValidationError(f"An active ward named '{name}' already exists", fields=["name"]) from e

        self.session.refresh(ward)
        logger.info(
            f"Ward created: {ward.name} ({ward.type.value}, capacity {ward.capacity}"
            f"{', beds provisioned' if data.provision_beds else ''})"
        )
        return ward

    def update_ward(self, ward_id: str, data: WardUpdate) -> Ward:
        """
        Updates the given fields of a ward.

        The capacity check runs under the ward lock so that no admission
        can occupy a bed between the count and the write.

        Raises:
            WardNotFoundError: unknown ward
            ValidationError: capacity below the occupied beds or name taken
        """
        changes = data.model_dump(exclude_unset=True)

        with self.locks.hold(ward_key(ward_id)):
            ward = self.ward_repo.get_for_update(ward_id)
            if not ward:
                raise WardNotFoundError(ward_id)

            if "name" in changes:
                changes["name"] = self._validate_name(changes["name"])
                if ward.is_active and self.ward_repo.get_active_by_name(changes["name"], exclude_id=ward.id):
                    raise ValidationError(
                        f"An active ward named '{changes['name']}' already exists",
                        fields=["name"]
                    )

            if "capacity" in changes:
                self._validate_capacity(changes["capacity"])
                occupied = self.ward_repo.count_occupied_beds(ward.id)
                if changes["capacity"] < occupied:
                    raise ValidationError(
                        f"Capacity {changes['capacity']} is below the {occupied} occupied bed(s)",
                        fields=["capacity"]
                    )

            for key in ("floor", "description", "daily_rate"):
                if key in changes and changes[key] is None:
                    setattr(ward, key, None)
            changes["updated_at"] = utcnow()

            try:
                self.ward_repo.update_from_dict(ward, changes)
            except IntegrityError as e:
                self.session.rollback()
                raise ValidationError("Ward name already in use", fields=["name"]) from e

        logger.info(f"Ward updated: {ward.name} ({', '.join(sorted(changes))})")
        return ward

    def activate_ward(self, ward_id: str) -> Ward:
        """
        Reactivates a ward.

        Raises:
            ValidationError: another active ward already uses the name
        """
        with self.locks.hold(ward_key(ward_id)):
            ward = self.ward_repo.get_for_update(ward_id)
            if not ward:
                raise WardNotFoundError(ward_id)
            if ward.is_active:
                return ward

            if self.ward_repo.get_active_by_name(ward.name, exclude_id=ward.id):
                raise ValidationError(
                    f"Another active ward is named '{ward.name}'",
                    fields=["name"]
                )

            ward.is_active = True
            ward.updated_at = utcnow()
            try:
                self.ward_repo.save(ward)
            except IntegrityError as e:
                self.session.rollback()
                raise ValidationError("Ward name already in use", fields=["name"]) from e

        logger.info(f"Ward activated: {ward.name}")
        return ward

    def deactivate_ward(self, ward_id: str) -> Ward:
        """
        Soft-deletes a ward.

        Its beds stop being offered for new admissions; current admissions
        are left untouched.
        """
        with self.locks.hold(ward_key(ward_id)):
            ward = self.ward_repo.get_for_update(ward_id)
            if not ward:
                raise WardNotFoundError(ward_id)
            if ward.is_active:
                ward.is_active = False
                ward.updated_at = utcnow()
                self.ward_repo.save(ward)

        logger.info(f"Ward deactivated: {ward.name}")
        return ward

    def delete_ward(self, ward_id: str, force: bool = False) -> Dict[str, int]:
        """
        Deletes a ward with its beds and admission history.

        Without `force`, a ward with active admissions or occupied beds is
        refused. The whole cascade runs in one transaction while holding
        the ward lock and the lock of every bed of the ward.

        Args:
            ward_id: Ward ID
            force: Also delete a ward that still has patients

        Returns:
            Usage counts found before the deletion

        Raises:
            WardNotFoundError: unknown ward
            ConflictError: ward in use and not forced
        """
        ward = self.get_ward(ward_id)
        bed_keys = [bed_key(bed_id) for bed_id in self.bed_repo.get_ids_by_ward(ward.id)]

        with self.locks.hold(ward_key(ward.id), *bed_keys):
            ward = self.ward_repo.get_for_update(ward_id)
            if not ward:
                raise WardNotFoundError(ward_id)

            usage = self.ward_repo.usage_counts(ward.id)
            if not force and (usage["activeAdmissions"] or usage["occupiedBeds"]):
                logger.warning(f"Ward deletion refused for {ward.name}: {usage}")
                raise ConflictError(
                    ConflictKind.WARD_IN_USE,
                    f"Cannot delete ward with {usage['activeAdmissions']} active admission(s). "
                    f"Use force=true to delete all related records.",
                    usage
                )

            name = ward.name
            try:
                self.admission_repo.delete_by_ward(ward.id)
                for bed in self.bed_repo.get_by_ward(ward.id):
                    self.session.delete(bed)
                self.session.flush()
                self.session.expire(ward)
                self.session.delete(ward)
                self.session.commit()
            except Exception:
                self.session.rollback()
                logger.error(f"Ward deletion rolled back for {name}")
                raise

        logger.info(f"Ward deleted: {name} (force={force}, {usage})")
        return usage

    # ============================================
    # VALIDATION
    # ============================================

    def _validate_name(self, name: Optional[str]) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Ward name is required", fields=["name"])
        return name

    def _validate_capacity(self, capacity: Optional[int]) -> None:
        if capacity is None or capacity <= 0 or capacity > settings.WARD_MAX_CAPACITY:
            raise ValidationError(
                f"Capacity must be between 1 and {settings.WARD_MAX_CAPACITY}",
                fields=["capacity"]
            )


# Name used across the allocation core
WardRegistry = WardService
