"""
Custom exception classes for the application.

Parsing never raises for malformed pasted text; these errors cover
lookups, staging edits and the commit step.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "PRODUCT_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with current resource state (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# CATALOG ERRORS
# ===================

class CustomerNotFoundError(NotFoundError):
    """Customer not found in the registry."""

    def __init__(self, customer_id: str):
        super().__init__(
            resource="Customer",
            identifier=customer_id,
            code="CUSTOMER_NOT_FOUND"
        )


class ProductNotFoundError(NotFoundError):
    """Product code not found in the catalog."""

    def __init__(self, product_code: str):
        super().__init__(
            resource="Product",
            identifier=product_code,
            code="PRODUCT_NOT_FOUND"
        )


# ===================
# STAGING ERRORS
# ===================

class StagingNotFoundError(NotFoundError):
    """Staging list unknown or expired."""

    def __init__(self, staging_id: str):
        super().__init__(
            resource="Staging list",
            identifier=staging_id,
            code="STAGING_NOT_FOUND"
        )


class StagingItemNotFoundError(NotFoundError):
    """Row not present in the staging list."""

    def __init__(self, item_id: str):
        super().__init__(
            resource="Staging item",
            identifier=item_id,
            code="STAGING_ITEM_NOT_FOUND"
        )


class StagingClosedError(ConflictError):
    """Staging list was already committed or discarded."""

    def __init__(self, staging_id: str, status: str):
        super().__init__(
            code="STAGING_CLOSED",
            message=f"Staging list is {status} and can no longer be edited",
            details={"staging_id": staging_id, "status": status}
        )


# ===================
# COMMIT ERRORS
# ===================

class UnresolvedItemsError(ValidationError):
    """Order rows without a matched product block the commit."""

    def __init__(self, rows: list[dict]):
        super().__init__(
            code="UNRESOLVED_ITEMS",
            message=(
                f"{len(rows)} item(s) have no matched product. "
                "Resolve them or confirm their removal before committing."
            ),
            details={"rows": rows}
        )


class MissingCustomerError(ValidationError):
    """Order commit attempted without a customer."""

    def __init__(self):
        super().__init__(
            code="CUSTOMER_REQUIRED",
            message="Please select a customer before committing the order"
        )


class MissingSupplierError(ValidationError):
    """Price-list commit attempted without a supplier."""

    def __init__(self):
        super().__init__(
            code="SUPPLIER_REQUIRED",
            message="Please select a supplier before committing the price list"
        )


class MissingDeliveryDateError(ValidationError):
    """Order commit attempted without a delivery date."""

    def __init__(self):
        super().__init__(
            code="DELIVERY_DATE_REQUIRED",
            message="Please select a delivery date before committing the order"
        )


class EmptyStagingError(ValidationError):
    """Nothing left to commit."""

    def __init__(self, kind: str = "order"):
        super().__init__(
            code="NO_ITEMS",
            message=f"No items to commit for this {kind}",
            details={"kind": kind}
        )
