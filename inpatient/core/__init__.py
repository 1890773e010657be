"""
Core module: central pieces of the system.
"""
from inpatient.core.database import create_db_and_tables, get_session, engine
from inpatient.core.websocket_manager import manager, ConnectionManager
from inpatient.core.locks import KeyedLockRegistry, allocation_locks
from inpatient.core.exceptions import (
    BaseAppException,
    ValidationError,
    NotFoundError,
    WardNotFoundError,
    BedNotFoundError,
    AdmissionNotFoundError,
    InvalidReferenceError,
    ConflictError,
    ConflictKind,
    LockTimeoutError,
)

__all__ = [
    "create_db_and_tables",
    "get_session",
    "engine",
    "manager",
    "ConnectionManager",
    "KeyedLockRegistry",
    "allocation_locks",
    "BaseAppException",
    "ValidationError",
    "NotFoundError",
    "WardNotFoundError",
    "BedNotFoundError",
    "AdmissionNotFoundError",
    "InvalidReferenceError",
    "ConflictError",
    "ConflictKind",
    "LockTimeoutError",
]
