"""
Custom application exceptions
"""

import enum
from typing import Optional, Dict, Any, List


class VenueBookingException(Exception):
    """Base exception for the venue booking application"""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationFailedError(VenueBookingException):
    """User-correctable input errors, tagged by field"""

    def __init__(
        self,
        errors: Dict[str, List[str]],
        submitted: Optional[Dict[str, Any]] = None
    ):
        self.errors = errors
        self.submitted = submitted or {}
        first_field = next(iter(errors), None)
        message = errors[first_field][0] if first_field else "Validation failed"
        super().__init__(
            message=message,
            code="VALIDATION_FAILED",
            status_code=422,
            details={"errors": errors, "submitted": self.submitted}
        )

    @classmethod
    def single(cls, field: str, message: str, submitted: Optional[Dict[str, Any]] = None):
        return cls({field: [message]}, submitted=submitted)

    @property
    def field(self) -> Optional[str]:
        return next(iter(self.errors), None)


class NotFoundError(VenueBookingException):
    """Resource not found errors"""

    def __init__(self, kind: str, identifier: Any = None):
        self.kind = kind
        self.identifier = identifier
        message = f"{kind} not found"
        if identifier is not None:
            message = f"{kind} with id {identifier} not found"
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404,
            details={"kind": kind, "id": identifier}
        )


class ConflictReason(str, enum.Enum):
    DOUBLE_BOOKED = "double_booked"
    CONCURRENT_MODIFICATION = "concurrent_modification"


class ConflictError(VenueBookingException):
    """Double booking or a write based on a stale row version"""

    def __init__(
        self,
        kind: str,
        identifier: Any,
        reason: ConflictReason,
        message: str,
        field: Optional[str] = None,
        submitted: Optional[Dict[str, Any]] = None
    ):
        self.kind = kind
        self.identifier = identifier
        self.reason = reason
        self.field = field
        self.submitted = submitted or {}
        details: Dict[str, Any] = {
            "kind": kind,
            "id": identifier,
            "reason": reason.value,
            "submitted": self.submitted,
        }
        if field:
            details["errors"] = {field: [message]}
        super().__init__(
            message=message,
            code="CONFLICT",
            status_code=409,
            details=details
        )


class ReferentialIntegrityError(VenueBookingException):
    """Delete blocked because other rows still reference the entity"""

    def __init__(self, kind: str, identifier: Any, dependents: Optional[Dict[str, int]] = None):
        self.kind = kind
        self.identifier = identifier
        self.dependents = dependents or {}
        referenced_by = " or ".join(self.dependents) if self.dependents else "other records"
        super().__init__(
            message=(
                f"Cannot delete this {kind.lower()}. It is still referenced by {referenced_by}. "
                f"Delete the related records first."
            ),
            code="REFERENTIAL_INTEGRITY_BLOCKED",
            status_code=409,
            details={"kind": kind, "id": identifier, "dependents": self.dependents}
        )


class AssetStoreError(VenueBookingException):
    """Asset store (image storage) call failed or timed out"""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        super().__init__(
            message=message or f"Asset store {operation} failed",
            code="ASSET_STORE_ERROR",
            status_code=502,
            details={"operation": operation}
        )


class StoreError(VenueBookingException):
    """Unexpected database failure"""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        super().__init__(
            message=message or f"Database operation {operation} failed",
            code="STORE_ERROR",
            status_code=500,
            details={"operation": operation}
        )
