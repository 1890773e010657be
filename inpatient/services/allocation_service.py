"""
Bed allocation service.

The only place where bed occupancy and admission status change, always
together and inside one transaction:
- Admission: claims a free bed and opens an ADMITTED admission
- Discharge: closes the admission and releases its bed
- Transfer: closes the admission, releases its bed, claims the target bed
  and opens the follow-up admission

Every operation holds the in-process locks of the wards, beds and patient
it touches, and re-reads the rows it decides on with SELECT ... FOR UPDATE.
The partial unique indexes on `admission` are the last line of defence.
"""
from typing import Callable, Iterable, Optional, Tuple, TypeVar, Union
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlmodel import Session
import logging
import time

from inpatient.config import settings
from inpatient.models.admission import Admission
from inpatient.models.bed import Bed
from inpatient.models.ward import Ward
from inpatient.models.enums import AdmissionTypeEnum, AdmissionStatusEnum
from inpatient.repositories.ward_repo import WardRepository
from inpatient.repositories.bed_repo import BedRepository
from inpatient.repositories.admission_repo import AdmissionRepository
from inpatient.schemas.admission import StandardAdmissionRequest, DayCareAdmissionRequest
from inpatient.core.exceptions import (
    BaseAppException,
    ValidationError,
    AdmissionNotFoundError,
    InvalidReferenceError,
    ConflictError,
    ConflictKind,
)
from inpatient.core.locks import (
    KeyedLockRegistry,
    allocation_locks,
    ward_key,
    bed_key,
    patient_key,
)
from inpatient.services.patient_directory import PatientDirectory, AcceptAllPatientDirectory
from inpatient.utils.helpers import utcnow

logger = logging.getLogger("inpatient.allocation")

T = TypeVar("T")

AdmissionRequestType = Union[StandardAdmissionRequest, DayCareAdmissionRequest]


class AllocationService:
    """
    Coordinates admissions, discharges and transfers.

    Args:
        session: Database session, owned by the caller
        locks: Keyed lock registry (process-wide registry by default)
        patient_directory: Patient lookup (accepts everyone by default)
    """

    def __init__(
        self,
        session: Session,
        locks: Optional[KeyedLockRegistry] = None,
        patient_directory: Optional[PatientDirectory] = None
    ):
        self.session = session
        self.locks = locks or allocation_locks
        self.patient_directory = patient_directory or AcceptAllPatientDirectory()
        self.ward_repo = WardRepository(session)
        self.bed_repo = BedRepository(session)
        self.admission_repo = AdmissionRepository(session)

    # ============================================
    # ADMISSION
    # ============================================

    def admit_patient(self, request: AdmissionRequestType) -> Admission:
        """
        Admits a patient into a bed.

        Args:
            request: Standard or day care admission request

        Returns:
            The new ADMITTED admission

        Raises:
            ValidationError: missing reason or day care fields
            InvalidReferenceError: unknown patient, ward or bed
            ConflictError: ALREADY_ADMITTED, BED_UNAVAILABLE or WARD_AT_CAPACITY
        """
        admission_type = AdmissionTypeEnum(request.admission_type)
        self._validate_request(request, admission_type)

        if not self.patient_directory.exists(request.patient_id):
            raise InvalidReferenceError("Patient", request.patient_id)

        admission = self._run_locked(
            "admit",
            (ward_key(request.ward_id), bed_key(request.bed_id), patient_key(request.patient_id)),
            lambda: self._admit(request, admission_type),
        )

        logger.info(
            f"Patient {admission.patient_id} admitted to bed {admission.bed_id} "
            f"of ward {admission.ward_id} ({admission_type.value})"
        )
        return admission

    def _admit(self, request: AdmissionRequestType, admission_type: AdmissionTypeEnum) -> Admission:
        ward = self.ward_repo.get_for_update(request.ward_id)
        if ward is None:
            raise InvalidReferenceError("Ward", request.ward_id)

        self._ensure_not_admitted(request.patient_id)
        self._claim_bed(ward, request.bed_id)

        admission = Admission(
            patient_id=request.patient_id,
            ward_id=ward.id,
            bed_id=request.bed_id,
            admission_date=request.admission_date or utcnow(),
            admission_type=admission_type,
            status=AdmissionStatusEnum.ADMITTED,
            admission_reason=request.admission_reason.strip(),
            notes=request.notes,
        )
        if isinstance(request, DayCareAdmissionRequest):
            admission.procedure_start_time = request.procedure_start_time
            admission.expected_discharge_time = request.expected_discharge_time
            admission.home_support_available = request.home_support_available

        self.session.add(admission)
        self.session.flush()
        return admission

    # ============================================
    # DISCHARGE
    # ============================================

    def discharge_patient(self, admission_id: str, discharge_notes: Optional[str] = None) -> Admission:
        """
        Discharges a patient and releases the bed.

        Raises:
            AdmissionNotFoundError: unknown admission
            ConflictError: ALREADY_DISCHARGED or NOT_ADMITTED
        """
        admission = self.admission_repo.get_by_id(admission_id)
        if not admission:
            raise AdmissionNotFoundError(admission_id)

        keys = (
            ward_key(admission.ward_id),
            bed_key(admission.bed_id),
            patient_key(admission.patient_id),
        )
        admission = self._run_locked(
            "discharge",
            keys,
            lambda: self._discharge(admission_id, discharge_notes),
        )

        logger.info(f"Patient {admission.patient_id} discharged from bed {admission.bed_id}")
        return admission

    def _discharge(self, admission_id: str, discharge_notes: Optional[str]) -> Admission:
        admission = self.admission_repo.get_for_update(admission_id)
        if admission is None:
            raise AdmissionNotFoundError(admission_id)
        self._ensure_admitted(admission)

        now = utcnow()
        admission.status = AdmissionStatusEnum.DISCHARGED
        admission.discharge_date = now
        admission.discharge_notes = discharge_notes
        admission.updated_at = now
        self.session.add(admission)

        self._release_bed(admission.bed_id, now)
        self.session.flush()
        return admission

    # ============================================
    # TRANSFER
    # ============================================

    def transfer_patient(
        self,
        admission_id: str,
        target_ward_id: str,
        target_bed_id: str,
        reason: Optional[str] = None,
        notes: Optional[str] = None
    ) -> Tuple[Admission, Admission]:
        """
        Moves an admitted patient to another bed, possibly in another ward.

        Args:
            admission_id: Active admission to move
            target_ward_id: Ward of the new bed
            target_bed_id: New bed
            reason: Reason of the new admission (defaults to the current one)
            notes: Notes of the new admission (defaults to the current ones)

        Returns:
            Tuple (closed TRANSFERRED admission, new ADMITTED admission)

        Raises:
            AdmissionNotFoundError: unknown admission
            ValidationError: target is the current bed
            InvalidReferenceError: unknown target ward or bed
            ConflictError: NOT_ADMITTED, ALREADY_DISCHARGED, BED_UNAVAILABLE,
                WARD_AT_CAPACITY
        """
        admission = self.admission_repo.get_by_id(admission_id)
        if not admission:
            raise AdmissionNotFoundError(admission_id)

        if target_bed_id == admission.bed_id:
            raise ValidationError(
                "The patient already occupies the target bed",
                fields=["target_bed_id"]
            )

        keys = (
            ward_key(admission.ward_id),
            ward_key(target_ward_id),
            bed_key(admission.bed_id),
            bed_key(target_bed_id),
            patient_key(admission.patient_id),
        )
        previous, current = self._run_locked(
            "transfer",
            keys,
            lambda: self._transfer(admission_id, target_ward_id, target_bed_id, reason, notes),
        )

        logger.info(
            f"Patient {current.patient_id} transferred from bed {previous.bed_id} "
            f"to bed {current.bed_id}"
        )
        return previous, current

    def _transfer(
        self,
        admission_id: str,
        target_ward_id: str,
        target_bed_id: str,
        reason: Optional[str],
        notes: Optional[str]
    ) -> Tuple[Admission, Admission]:
        source = self.admission_repo.get_for_update(admission_id)
        if source is None:
            raise AdmissionNotFoundError(admission_id)
        self._ensure_admitted(source)

        target_ward = self.ward_repo.get_for_update(target_ward_id)
        if target_ward is None:
            raise InvalidReferenceError("Ward", target_ward_id)

        now = utcnow()
        source.status = AdmissionStatusEnum.TRANSFERRED
        source.discharge_date = now
        source.updated_at = now
        self.session.add(source)
        self._release_bed(source.bed_id, now)
        # Frees the patient and bed slots of the partial unique indexes
        self.session.flush()

        self._claim_bed(target_ward, target_bed_id)

        current = Admission(
            patient_id=source.patient_id,
            ward_id=target_ward.id,
            bed_id=target_bed_id,
            admission_date=now,
            admission_type=AdmissionTypeEnum.TRANSFER,
            status=AdmissionStatusEnum.ADMITTED,
            admission_reason=(reason or "").strip() or source.admission_reason,
            notes=notes if notes is not None else source.notes,
            transferred_from_id=source.id,
        )
        self.session.add(current)
        self.session.flush()
        return source, current

    # ============================================
    # CHECKS
    # ============================================

    def _validate_request(self, request: AdmissionRequestType, admission_type: AdmissionTypeEnum) -> None:
        missing = []
        if not (request.admission_reason or "").strip():
            missing.append("admission_reason")

        if admission_type == AdmissionTypeEnum.DAY_CARE:
            if getattr(request, "procedure_start_time", None) is None:
                missing.append("procedure_start_time")
            if getattr(request, "expected_discharge_time", None) is None:
                missing.append("expected_discharge_time")
            if getattr(request, "home_support_available", None) is not True:
                missing.append("home_support_available")

        if missing:
            raise ValidationError(
                f"Missing or invalid field(s): {', '.join(missing)}",
                fields=missing
            )

        if (
            admission_type == AdmissionTypeEnum.DAY_CARE
            and request.expected_discharge_time < request.procedure_start_time
        ):
            raise ValidationError(
                "Expected discharge time cannot be earlier than the procedure start time",
                fields=["expected_discharge_time"]
            )

    def _ensure_not_admitted(self, patient_id: str) -> None:
        existing = self.admission_repo.get_active_for_patient(patient_id)
        if existing:
            raise ConflictError(
                ConflictKind.ALREADY_ADMITTED,
                f"Patient {patient_id} is already admitted",
                {"patientId": patient_id, "admissionId": existing.id, "bedId": existing.bed_id}
            )

    def _ensure_admitted(self, admission: Admission) -> None:
        if admission.status == AdmissionStatusEnum.DISCHARGED:
            raise ConflictError(
                ConflictKind.ALREADY_DISCHARGED,
                "Admission is already discharged",
                {"admissionId": admission.id}
            )
        if admission.status != AdmissionStatusEnum.ADMITTED:
            raise ConflictError(
                ConflictKind.NOT_ADMITTED,
                f"Admission is {admission.status.value}, not ADMITTED",
                {"admissionId": admission.id, "status": admission.status.value}
            )

    def _claim_bed(self, ward: Ward, bed_id: str) -> Bed:
        """
        Marks a bed of `ward` as occupied after checking it can be used.

        Raises:
            InvalidReferenceError: unknown bed
            ConflictError: BED_UNAVAILABLE or WARD_AT_CAPACITY
        """
        bed = self.bed_repo.get_for_update(bed_id)
        if bed is None:
            raise InvalidReferenceError("Bed", bed_id)

        reason = None
        if bed.ward_id != ward.id:
            reason = "bed belongs to another ward"
        elif not ward.is_active:
            reason = "ward is inactive"
        elif not bed.is_active:
            reason = "bed is inactive"
        elif bed.is_occupied:
            reason = "bed is occupied"

        if reason:
            raise ConflictError(
                ConflictKind.BED_UNAVAILABLE,
                f"Bed {bed.bed_number} is not available: {reason}",
                {"bedId": bed.id, "wardId": ward.id, "reason": reason}
            )

        occupied = self.ward_repo.count_occupied_beds(ward.id)
        if occupied >= ward.capacity:
            raise ConflictError(
                ConflictKind.WARD_AT_CAPACITY,
                f"Ward {ward.name} is at capacity ({occupied}/{ward.capacity})",
                {"wardId": ward.id, "capacity": ward.capacity, "occupied": occupied}
            )

        bed.is_occupied = True
        bed.updated_at = utcnow()
        self.session.add(bed)
        return bed

    def _release_bed(self, bed_id: str, now) -> None:
        bed = self.bed_repo.get_for_update(bed_id)
        if bed is not None:
            bed.is_occupied = False
            bed.updated_at = now
            self.session.add(bed)

    # ============================================
    # TRANSACTIONS
    # ============================================

    def _run_locked(self, operation: str, keys: Iterable[str], work: Callable[[], T]) -> T:
        """
        Runs `work` and commits, holding the given lock keys.

        Storage errors without visible effect (deadlock, busy database) are
        retried up to TRANSACTION_RETRIES times. Everything else rolls the
        transaction back and propagates.
        """
        attempts = settings.TRANSACTION_RETRIES + 1

        for attempt in range(1, attempts + 1):
            with self.locks.hold(*keys):
                try:
                    result = work()
                    self.session.commit()
                    return result
                except ConflictError as e:
                    self.session.rollback()
                    logger.warning(f"{operation} rejected: {e.message}")
                    raise
                except BaseAppException:
                    self.session.rollback()
                    raise
                except IntegrityError as e:
                    self.session.rollback()
                    conflict = self._conflict_from_integrity(e)
                    logger.warning(f"{operation} rejected by the database: {conflict.message}")
                    raise conflict from e
                except OperationalError as e:
                    self.session.rollback()
                    if attempt == attempts:
                        logger.error(f"{operation} rolled back after {attempt} attempt(s): {e.orig}")
                        raise
                    logger.warning(f"{operation} attempt {attempt} failed ({e.orig}), retrying")
                except Exception as e:
                    self.session.rollback()
                    logger.error(f"{operation} rolled back: {e}")
                    raise

            time.sleep(0.05 * attempt)

    def _conflict_from_integrity(self, error: IntegrityError) -> ConflictError:
        message = str(error.orig).lower()
        if "patient" in message:
            return ConflictError(
                ConflictKind.ALREADY_ADMITTED,
                "Patient already has an active admission"
            )
        return ConflictError(
            ConflictKind.BED_UNAVAILABLE,
            "Bed already has an active admission"
        )


AllocationCoordinator = AllocationService
