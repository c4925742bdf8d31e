"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.catalog import CustomerRecord, ProductRecord, SupplierRecord
from models.staging import (
    StagingStatus,
    StagingKind,
    RawLine,
    ParsedOrderItem,
    ParsedPriceItem,
    StagingSnapshot,
)
from models.quick_paste import (
    OrderPasteRequest,
    OrderPasteResponse,
    StagingItemUpdate,
    CustomerSelectRequest,
    OrderCommitRequest,
    OrderCommitResponse,
    PriceListPasteRequest,
    PriceListPasteResponse,
    SupplierSelectRequest,
    PriceListCommitRequest,
    PriceListCommitResponse,
)

__all__ = [
    # Base
    "BaseSchema",

    # Catalog
    "CustomerRecord",
    "ProductRecord",
    "SupplierRecord",

    # Staging
    "StagingStatus",
    "StagingKind",
    "RawLine",
    "ParsedOrderItem",
    "ParsedPriceItem",
    "StagingSnapshot",

    # Quick paste
    "OrderPasteRequest",
    "OrderPasteResponse",
    "StagingItemUpdate",
    "CustomerSelectRequest",
    "OrderCommitRequest",
    "OrderCommitResponse",
    "PriceListPasteRequest",
    "PriceListPasteResponse",
    "SupplierSelectRequest",
    "PriceListCommitRequest",
    "PriceListCommitResponse",
]
