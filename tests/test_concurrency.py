"""
Concurrent allocation tests.

Every worker runs in its own thread with its own session against a shared
file database, the way concurrent requests would.
"""
import threading

import pytest
from sqlmodel import Session, select

from inpatient.core.exceptions import ConflictError, ConflictKind, InvalidReferenceError
from inpatient.core.locks import KeyedLockRegistry
from inpatient.models.admission import Admission
from inpatient.models.bed import Bed
from inpatient.models.ward import Ward
from inpatient.models.enums import AdmissionStatusEnum
from inpatient.schemas.admission import StandardAdmissionRequest
from inpatient.services.allocation_service import AllocationService
from inpatient.services.ward_service import WardService


WORKERS = 8


@pytest.fixture
def shared_ward(file_engine):
    """Ward with one bed per worker and room for all of them."""
    with Session(file_engine) as session:
        ward = Ward(name="General-A", capacity=WORKERS)
        session.add(ward)
        session.commit()
        beds = [Bed(ward_id=ward.id, bed_number=str(i)) for i in range(1, WORKERS + 1)]
        session.add_all(beds)
        session.commit()
        return {"ward_id": ward.id, "bed_ids": [bed.id for bed in beds]}


def race(engine, operations):
    """
    Starts every operation at the same time, each in its own thread with
    its own session. Returns one (result, error) pair per operation.
    """
    barrier = threading.Barrier(len(operations))
    outcomes = [None] * len(operations)

    def worker(index, operation):
        with Session(engine) as session:
            barrier.wait()
            try:
                outcomes[index] = (operation(session), None)
            except Exception as e:
                outcomes[index] = (None, e)

    threads = [
        threading.Thread(target=worker, args=(i, op))
        for i, op in enumerate(operations)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    return outcomes


def run_concurrently(engine, locks, requests):
    """Submits every admission at the same time, returns (admission ids, errors)."""
    outcomes = race(engine, [
        lambda session, r=r: AllocationService(session, locks=locks).admit_patient(r).id
        for r in requests
    ])
    admissions = [result for result, error in outcomes if error is None]
    errors = [error for result, error in outcomes if error is not None]
    return admissions, errors


def request_for(patient_id, ward_id, bed_id):
    return StandardAdmissionRequest(
        patient_id=patient_id,
        ward_id=ward_id,
        bed_id=bed_id,
        admission_type="EMERGENCY",
        admission_reason="Trauma",
    )


class TestConcurrentAdmissions:
    """Races on the same bed or the same patient."""

    def test_same_bed_has_one_winner(self, file_engine, shared_ward):
        locks = KeyedLockRegistry(timeout=10.0)
        bed_id = shared_ward["bed_ids"][0]
        requests = [
            request_for(f"P{i}", shared_ward["ward_id"], bed_id)
            for i in range(WORKERS)
        ]

        admissions, errors = run_concurrently(file_engine, locks, requests)

        assert len(admissions) == 1
        assert len(errors) == WORKERS - 1
        assert all(isinstance(e, ConflictError) for e in errors)
        assert {e.kind for e in errors} == {ConflictKind.BED_UNAVAILABLE}

        with Session(file_engine) as session:
            active = session.exec(
                select(Admission).where(Admission.status == AdmissionStatusEnum.ADMITTED)
            ).all()
            assert [a.id for a in active] == admissions
            assert session.get(Bed, bed_id).is_occupied is True

    def test_same_patient_has_one_admission(self, file_engine, shared_ward):
        locks = KeyedLockRegistry(timeout=10.0)
        requests = [
            request_for("P1", shared_ward["ward_id"], bed_id)
            for bed_id in shared_ward["bed_ids"]
        ]

        admissions, errors = run_concurrently(file_engine, locks, requests)

        assert len(admissions) == 1
        assert len(errors) == WORKERS - 1
        assert {e.kind for e in errors} == {ConflictKind.ALREADY_ADMITTED}

        with Session(file_engine) as session:
            occupied = session.exec(select(Bed).where(Bed.is_occupied == True)).all()  # noqa: E712
            assert len(occupied) == 1

    def test_distinct_beds_all_succeed(self, file_engine, shared_ward):
        locks = KeyedLockRegistry(timeout=10.0)
        requests = [
            request_for(f"P{i}", shared_ward["ward_id"], bed_id)
            for i, bed_id in enumerate(shared_ward["bed_ids"])
        ]

        admissions, errors = run_concurrently(file_engine, locks, requests)

        assert errors == []
        assert len(admissions) == WORKERS

    def test_capacity_holds_under_contention(self, file_engine):
        """Two beds, one free slot: exactly one admission wins."""
        with Session(file_engine) as session:
            ward = Ward(name="ICU-1", capacity=1)
            session.add(ward)
            session.commit()
            beds = [Bed(ward_id=ward.id, bed_number=str(i)) for i in (1, 2)]
            session.add_all(beds)
            session.commit()
            ward_id, bed_ids = ward.id, [bed.id for bed in beds]

        locks = KeyedLockRegistry(timeout=10.0)
        requests = [request_for(f"P{i}", ward_id, bed_id) for i, bed_id in enumerate(bed_ids)]

        admissions, errors = run_concurrently(file_engine, locks, requests)

        assert len(admissions) == 1
        assert [e.kind for e in errors] == [ConflictKind.WARD_AT_CAPACITY]


class TestConcurrentLifecycle:
    """Races between admissions, discharges, transfers and ward deletion."""

    def test_force_delete_racing_admission(self, file_engine, shared_ward):
        """Whichever runs first, nothing of the ward survives."""
        locks = KeyedLockRegistry(timeout=10.0)
        ward_id = shared_ward["ward_id"]
        request = request_for("P1", ward_id, shared_ward["bed_ids"][0])

        (admitted, admit_error), (usage, delete_error) = race(file_engine, [
            lambda session: AllocationService(session, locks=locks).admit_patient(request).id,
            lambda session: WardService(session, locks=locks).delete_ward(ward_id, force=True),
        ])

        assert delete_error is None
        if admit_error is None:
            assert usage["activeAdmissions"] == 1
        else:
            assert isinstance(admit_error, InvalidReferenceError)
            assert usage["activeAdmissions"] == 0

        with Session(file_engine) as session:
            assert session.get(Ward, ward_id) is None
            assert session.exec(select(Bed).where(Bed.ward_id == ward_id)).all() == []
            assert session.exec(select(Admission).where(Admission.ward_id == ward_id)).all() == []

    def test_double_discharge_has_one_winner(self, file_engine, shared_ward):
        locks = KeyedLockRegistry(timeout=10.0)
        bed_id = shared_ward["bed_ids"][0]
        with Session(file_engine) as session:
            admission_id = AllocationService(session, locks=locks).admit_patient(
                request_for("P1", shared_ward["ward_id"], bed_id)
            ).id

        outcomes = race(file_engine, [
            lambda session: AllocationService(session, locks=locks).discharge_patient(admission_id).id,
            lambda session: AllocationService(session, locks=locks).discharge_patient(admission_id).id,
        ])

        errors = [error for _, error in outcomes if error is not None]
        assert [result for result, _ in outcomes if result is not None] == [admission_id]
        assert len(errors) == 1
        assert isinstance(errors[0], ConflictError)
        assert errors[0].kind == ConflictKind.ALREADY_DISCHARGED

        with Session(file_engine) as session:
            admission = session.get(Admission, admission_id)
            assert admission.status == AdmissionStatusEnum.DISCHARGED
            assert admission.discharge_date is not None
            assert session.get(Bed, bed_id).is_occupied is False

    def test_transfer_and_admission_into_same_bed(self, file_engine, shared_ward):
        """The target bed ends up with exactly one patient."""
        locks = KeyedLockRegistry(timeout=10.0)
        ward_id = shared_ward["ward_id"]
        source_bed, target_bed = shared_ward["bed_ids"][:2]
        with Session(file_engine) as session:
            admission_id = AllocationService(session, locks=locks).admit_patient(
                request_for("P1", ward_id, source_bed)
            ).id

        (moved, transfer_error), (admitted, admit_error) = race(file_engine, [
            lambda session: AllocationService(session, locks=locks).transfer_patient(
                admission_id, ward_id, target_bed
            )[1].patient_id,
            lambda session: AllocationService(session, locks=locks).admit_patient(
                request_for("P2", ward_id, target_bed)
            ).patient_id,
        ])

        errors = [e for e in (transfer_error, admit_error) if e is not None]
        assert len(errors) == 1
        assert errors[0].kind == ConflictKind.BED_UNAVAILABLE

        with Session(file_engine) as session:
            active = session.exec(
                select(Admission).where(Admission.status == AdmissionStatusEnum.ADMITTED)
            ).all()
            holders = {a.bed_id: a.patient_id for a in active}
            assert holders[target_bed] == (moved or admitted)

            source = session.get(Admission, admission_id)
            if transfer_error is None:
                assert source.status == AdmissionStatusEnum.TRANSFERRED
                assert session.get(Bed, source_bed).is_occupied is False
                assert len(active) == 1
            else:
                assert source.status == AdmissionStatusEnum.ADMITTED
                assert session.get(Bed, source_bed).is_occupied is True
                assert len(active) == 2
            assert session.get(Bed, target_bed).is_occupied is True
