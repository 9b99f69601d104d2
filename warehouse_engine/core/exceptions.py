"""
Domain error taxonomy.

Every error is recoverable at the caller boundary. The HTTP layer turns
them into JSON responses using ``status_code`` and ``code``.
"""
from typing import Optional


class WarehouseError(Exception):
    """Base class for all business-rule failures raised by the services."""

    status_code: int = 400
    code: str = "WAREHOUSE_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class NotFoundError(WarehouseError):
    """A referenced entity does not exist."""
    status_code = 404
    code = "NOT_FOUND"


class ValidationError(WarehouseError):
    """Malformed or missing required input."""
    status_code = 422
    code = "VALIDATION_ERROR"


class ConflictError(WarehouseError):
    """Entity is not in the state required for the requested transition."""
    status_code = 409
    code = "CONFLICT"


class InsufficientStockError(WarehouseError):
    """A lot does not hold enough units for the requested decrement."""
    status_code = 409
    code = "INSUFFICIENT_STOCK"


class ResourceUnavailableError(WarehouseError):
    """No vehicle or driver can take the route."""
    status_code = 409
    code = "RESOURCE_UNAVAILABLE"


class SafetyViolationError(WarehouseError):
    """Pre-departure checklist gate failed."""
    status_code = 422
    code = "SAFETY_VIOLATION"


class OwnershipError(WarehouseError):
    """A child entity was referenced through the wrong parent."""
    status_code = 403
    code = "OWNERSHIP_MISMATCH"


class PartialAssignmentError(WarehouseError):
    """
    Route assignment stopped midway.

    ``result`` holds the saga step log so a caller (or a repair job) can
    see which writes were applied and which compensations ran.
    """
    status_code = 500
    code = "PARTIAL_ASSIGNMENT"

    def __init__(self, message: str, result=None):
        super().__init__(message)
        self.result = result
