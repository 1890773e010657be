"""
Data access repositories.
Wrap the SQL queries behind a small, explicit interface.
"""
from inpatient.repositories.base import BaseRepository
from inpatient.repositories.ward_repo import WardRepository
from inpatient.repositories.bed_repo import BedRepository
from inpatient.repositories.admission_repo import AdmissionRepository

__all__ = [
    "BaseRepository",
    "WardRepository",
    "BedRepository",
    "AdmissionRepository",
]
