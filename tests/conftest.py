"""
Pytest fixtures.
"""
import os

# The application engine must never touch a real database during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session
from sqlmodel.pool import StaticPool

import inpatient.models  # noqa: F401
from inpatient.core.database import build_engine, get_session
from inpatient.core.locks import KeyedLockRegistry
from inpatient.models.enums import WardTypeEnum, BedTypeEnum
from main import app


# Test engine (in-memory SQLite)
@pytest.fixture(name="engine")
def engine_fixture():
    """Creates an in-memory test engine."""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="file_engine")
def file_engine_fixture(tmp_path):
    """
    File-backed SQLite engine.

    Every thread gets its own connection, which the in-memory engine
    cannot offer.
    """
    engine = build_engine(f"sqlite:///{tmp_path / 'allocation.db'}")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    """Creates a test session."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="locks")
def locks_fixture():
    """Private lock registry with a short timeout."""
    return KeyedLockRegistry(timeout=2.0)


@pytest.fixture(name="client")
def client_fixture(session):
    """Creates a test client with the session injected."""
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


# Test data fixtures

@pytest.fixture
def create_ward(session):
    """Factory fixture to create wards."""
    from inpatient.models.ward import Ward

    def _create_ward(
        name="General-A",
        capacity=2,
        type=WardTypeEnum.GENERAL,
        is_active=True,
        **kwargs
    ):
        ward = Ward(name=name, capacity=capacity, type=type, is_active=is_active, **kwargs)
        session.add(ward)
        session.commit()
        session.refresh(ward)
        return ward

    return _create_ward


@pytest.fixture
def create_bed(session):
    """Factory fixture to create beds."""
    from inpatient.models.bed import Bed

    def _create_bed(ward_id, bed_number="1", bed_type=BedTypeEnum.GENERAL, is_active=True, **kwargs):
        bed = Bed(
            ward_id=ward_id,
            bed_number=bed_number,
            bed_type=bed_type,
            is_active=is_active,
            **kwargs
        )
        session.add(bed)
        session.commit()
        session.refresh(bed)
        return bed

    return _create_bed


@pytest.fixture
def admit(session, locks):
    """Factory fixture to admit patients through the allocation service."""
    from inpatient.schemas.admission import StandardAdmissionRequest, DayCareAdmissionRequest
    from inpatient.services.allocation_service import AllocationService

    def _admit(patient_id, ward_id, bed_id, admission_type="EMERGENCY", reason="Observation", **kwargs):
        data = dict(
            patient_id=patient_id,
            ward_id=ward_id,
            bed_id=bed_id,
            admission_type=admission_type,
            admission_reason=reason,
            **kwargs
        )
        if admission_type == "DAY_CARE":
            request = DayCareAdmissionRequest(**data)
        else:
            request = StandardAdmissionRequest(**data)
        return AllocationService(session, locks=locks).admit_patient(request)

    return _admit


@pytest.fixture
def ward_with_beds(create_ward, create_bed):
    """Ward "General-A" with capacity 2 and free beds B1 and B2."""
    ward = create_ward(name="General-A", capacity=2)
    beds = [create_bed(ward.id, bed_number=f"B{i}") for i in range(1, 3)]
    return {
        "ward": ward,
        "beds": beds,
    }
