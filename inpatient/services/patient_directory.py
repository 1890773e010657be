"""
Patient directory.

Patients live in an external system. The allocation service only needs to
know whether an identifier refers to a known patient.
"""
from typing import Iterable, Protocol, runtime_checkable


@runtime_checkable
class PatientDirectory(Protocol):
    """Lookup of patient identifiers owned by another system."""

    def exists(self, patient_id: str) -> bool:
        ...


class AcceptAllPatientDirectory:
    """Default directory: every identifier is a known patient."""

    def exists(self, patient_id: str) -> bool:
        return True


class StaticPatientDirectory:
    """Directory backed by a fixed set of identifiers."""

    def __init__(self, patient_ids: Iterable[str]):
        self._patient_ids = set(patient_ids)

    def exists(self, patient_id: str) -> bool:
        return patient_id in self._patient_ids
