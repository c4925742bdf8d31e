"""
Custom exceptions module.

See exceptions/errors.py for the error envelope format.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    DatabaseError,

    # Catalog
    CustomerNotFoundError,
    ProductNotFoundError,

    # Staging
    StagingNotFoundError,
    StagingItemNotFoundError,
    StagingClosedError,

    # Commit
    UnresolvedItemsError,
    MissingCustomerError,
    MissingSupplierError,
    MissingDeliveryDateError,
    EmptyStagingError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "DatabaseError",

    # Catalog
    "CustomerNotFoundError",
    "ProductNotFoundError",

    # Staging
    "StagingNotFoundError",
    "StagingItemNotFoundError",
    "StagingClosedError",

    # Commit
    "UnresolvedItemsError",
    "MissingCustomerError",
    "MissingSupplierError",
    "MissingDeliveryDateError",
    "EmptyStagingError",
]
