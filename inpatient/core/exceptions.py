"""
Custom system exceptions.
Semantic exceptions so that every layer can react to allocation failures.
"""
from enum import Enum
from typing import Any, Dict, List, Optional


class BaseAppException(Exception):
    """
    Base application exception.
    Every custom exception inherits from this one.
    """
    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# ============================================
# VALIDATION ERRORS
# ============================================

class ValidationError(BaseAppException):
    """Malformed or missing input. Caller's fault, never retried."""
    status_code = 400

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        self.fields = list(fields or [])
        details = {"fields": self.fields} if self.fields else None
        super().__init__(message, "VALIDATION_ERROR", details)


# ============================================
# NOT FOUND ERRORS
# ============================================

class NotFoundError(BaseAppException):
    """Resource not found."""
    status_code = 404

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            f"{resource} with identifier '{identifier}' not found",
            "NOT_FOUND",
            {"resource": resource, "id": identifier}
        )
        self.resource = resource
        self.identifier = identifier


class WardNotFoundError(NotFoundError):
    """Ward not found."""
    def __init__(self, ward_id: str):
        super().__init__("Ward", ward_id)


class BedNotFoundError(NotFoundError):
    """Bed not found."""
    def __init__(self, bed_id: str):
        super().__init__("Bed", bed_id)


class AdmissionNotFoundError(NotFoundError):
    """Admission not found."""
    def __init__(self, admission_id: str):
        super().__init__("Admission", admission_id)


# ============================================
# REFERENCE ERRORS
# ============================================

class InvalidReferenceError(BaseAppException):
    """Dangling reference to a patient, ward or bed inside a request."""
    status_code = 422

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            f"Referenced {resource.lower()} '{identifier}' does not exist",
            "REFERENCE_ERROR",
            {"resource": resource, "id": identifier}
        )
        self.resource = resource
        self.identifier = identifier


# ============================================
# CONFLICT ERRORS
# ============================================

class ConflictKind(str, Enum):
    """Invariant that blocked the operation."""
    ALREADY_ADMITTED = "ALREADY_ADMITTED"
    BED_UNAVAILABLE = "BED_UNAVAILABLE"
    WARD_AT_CAPACITY = "WARD_AT_CAPACITY"
    ALREADY_DISCHARGED = "ALREADY_DISCHARGED"
    NOT_ADMITTED = "NOT_ADMITTED"
    WARD_IN_USE = "WARD_IN_USE"
    BED_IN_USE = "BED_IN_USE"


class ConflictError(BaseAppException):
    """
    Invariant violation.

    Carries enough detail for the caller to pick another action
    (another bed, a force delete, ...). Never retried by the system.
    """
    status_code = 409

    def __init__(
        self,
        kind: ConflictKind,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.kind = kind
        super().__init__(
            message,
            "CONFLICT",
            {"kind": kind.value, **(details or {})}
        )


# ============================================
# STORAGE / CONCURRENCY ERRORS
# ============================================

class LockTimeoutError(BaseAppException):
    """
    Allocation locks could not be acquired in time.
    Nothing was written, so the request is safe to retry.
    """
    status_code = 503

    def __init__(self, keys: List[str], timeout: float):
        super().__init__(
            f"Timed out after {timeout:.1f}s waiting for {', '.join(keys)}",
            "LOCK_TIMEOUT",
            {"keys": keys, "retryable": True}
        )
        self.keys = keys
