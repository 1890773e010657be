"""
Admission ledger.
Read side of admissions, plus edition of their free-text details.
"""
from typing import Optional, List, Tuple, Dict, Any
from sqlmodel import Session
import logging

from inpatient.config import settings
from inpatient.models.admission import Admission
from inpatient.models.enums import AdmissionStatusEnum, AdmissionTypeEnum
from inpatient.repositories.admission_repo import AdmissionRepository
from inpatient.schemas.admission import AdmissionUpdate
from inpatient.core.exceptions import (
    ValidationError,
    AdmissionNotFoundError,
    ConflictError,
    ConflictKind,
)
from inpatient.core.locks import KeyedLockRegistry, allocation_locks, patient_key
from inpatient.utils.helpers import utcnow

logger = logging.getLogger("inpatient.admissions")


class AdmissionLedger:
    """Queries over admissions. Allocation changes go through AllocationService."""

    def __init__(self, session: Session, locks: Optional[KeyedLockRegistry] = None):
        self.session = session
        self.locks = locks or allocation_locks
        self.admission_repo = AdmissionRepository(session)

    def get_admission(self, admission_id: str) -> Admission:
        admission = self.admission_repo.get_by_id(admission_id)
        if not admission:
            raise AdmissionNotFoundError(admission_id)
        return admission

    def get_admissions(
        self,
        ward_id: Optional[str] = None,
        status: Optional[AdmissionStatusEnum] = None,
        admission_type: Optional[AdmissionTypeEnum] = None,
        patient_id: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = None
    ) -> Tuple[List[Admission], int]:
        """
        Lists admissions with filters, newest first.

        Returns:
            Tuple (admissions of the page, total matching)
        """
        return self.admission_repo.search(
            ward_id=ward_id,
            status=status,
            admission_type=admission_type,
            patient_id=patient_id,
            search=search,
            page=page,
            limit=limit or settings.DEFAULT_PAGE_SIZE,
        )

    def get_current_admissions(self, ward_id: Optional[str] = None) -> List[Admission]:
        """ADMITTED admissions, most recent admission date first."""
        return self.admission_repo.get_current(ward_id)

    def get_active_admission_for_patient(self, patient_id: str) -> Optional[Admission]:
        return self.admission_repo.get_active_for_patient(patient_id)

    def get_admission_stats(self) -> Dict[str, Any]:
        """Admission counts by status and type."""
        by_status = self.admission_repo.count_by_status()
        return {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "by_type": self.admission_repo.count_by_type(),
        }

    def update_admission_details(self, admission_id: str, data: AdmissionUpdate) -> Admission:
        """
        Edits the reason and notes of an active admission.

        Raises:
            AdmissionNotFoundError: unknown admission
            ValidationError: empty reason
            ConflictError: admission already closed
        """
        admission = self.get_admission(admission_id)
        changes = data.model_dump(exclude_unset=True)

        if "admission_reason" in changes:
            reason = (changes["admission_reason"] or "").strip()
            if not reason:
                raise ValidationError("Admission reason cannot be empty", fields=["admission_reason"])
            changes["admission_reason"] = reason

        with self.locks.hold(patient_key(admission.patient_id)):
            admission = self.admission_repo.get_for_update(admission_id)
            if admission is None:
                raise AdmissionNotFoundError(admission_id)
            if admission.status != AdmissionStatusEnum.ADMITTED:
                raise ConflictError(
                    ConflictKind.ALREADY_DISCHARGED
                    if admission.status == AdmissionStatusEnum.DISCHARGED
                    else ConflictKind.NOT_ADMITTED,
                    "Only active admissions can be edited",
                    {"admissionId": admission.id, "status": admission.status.value}
                )

            if "notes" in changes:
                admission.notes = changes.pop("notes")
            changes["updated_at"] = utcnow()
            self.admission_repo.update_from_dict(admission, changes)

        logger.info(f"Admission {admission_id} details updated")
        return admission
