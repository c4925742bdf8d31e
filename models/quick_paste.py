"""
Quick-paste request/response schemas.

Covers both pasted customer orders and pasted supplier price lists.
Parsing never fails on messy text; unmatched order lines come back as
rows with matched_product_code=None.
"""

from pydantic import Field
from typing import Optional
from decimal import Decimal
from datetime import date

from models.base import BaseSchema
from models.catalog import CustomerRecord, SupplierRecord
from models.staging import ParsedOrderItem, ParsedPriceItem


# ===================
# ORDERS
# ===================

class OrderPasteRequest(BaseSchema):
    """Pasted WhatsApp order text."""

    text: str = Field(
        ...,
        min_length=1,
        description="Raw pasted order, first line usually the outlet name"
    )


class OrderPasteResponse(BaseSchema):
    """Staged order ready for review."""

    staging_id: str = Field(..., description="Id to reference this staging list")
    customer: Optional[CustomerRecord] = Field(None, description="Customer detected from line 1")
    customer_score: Optional[float] = Field(None, description="Fuzzy score of the customer match")
    delivery_date: date = Field(..., description="Pasted date, or the cut-off based default")
    delivery_date_override: Optional[date] = Field(None, description="Date line found in the paste")
    items: list[ParsedOrderItem] = Field(default_factory=list)
    item_count: int = Field(default=0)
    resolved_count: int = Field(default=0, description="Rows with a matched product")
    unresolved_count: int = Field(default=0, description="Rows needing manual selection")
    has_unresolved: bool = Field(default=False)
    expires_in_minutes: int = Field(default=30, description="Minutes until the staging list expires")


class StagingItemUpdate(BaseSchema):
    """
    Edit one staged row.

    Only the fields sent are changed. Sending matched_product_code also
    resets the row's UOM to that product's base unit; null clears the match.
    """

    quantity: Optional[Decimal] = Field(None, gt=0, description="New quantity")
    uom: Optional[str] = Field(None, min_length=1, max_length=20, description="New unit of measure")
    price: Optional[Decimal] = Field(None, ge=0, description="New unit price")
    matched_product_code: Optional[str] = Field(None, description="Manually selected product code")


class CustomerSelectRequest(BaseSchema):
    """Manual customer selection."""

    customer_id: str = Field(..., min_length=1, description="Customers.id")


class OrderCommitRequest(BaseSchema):
    """Confirm a reviewed order."""

    delivery_date: Optional[date] = Field(None, description="Overrides the staged delivery date")
    logged_by: str = Field(default="", max_length=100, description="User committing the order")
    acknowledge_unresolved: bool = Field(
        default=False,
        description="Remove rows without a product instead of blocking the commit"
    )


class OrderCommitResponse(BaseSchema):
    """Result of an order commit."""

    do_number: str = Field(..., description="Delivery-order number shared by all rows")
    customer_name: str
    delivery_date: date
    rows_inserted: int
    removed_unresolved: int = Field(default=0, description="Unmatched rows removed on acknowledgement")


# ===================
# PRICE LISTS
# ===================

class PriceListPasteRequest(BaseSchema):
    """Pasted supplier price list."""

    text: str = Field(..., min_length=1, description="Raw pasted price list")


class PriceListPasteResponse(BaseSchema):
    """Staged price rows; unmatched lines are not included."""

    staging_id: str
    supplier: Optional[SupplierRecord] = Field(None, description="Supplier detected from line 1")
    items: list[ParsedPriceItem] = Field(default_factory=list)
    item_count: int = Field(default=0)
    dropped_count: int = Field(default=0, description="Lines that were not staged")
    expires_in_minutes: int = Field(default=30)


class SupplierSelectRequest(BaseSchema):
    """Manual supplier selection."""

    supplier_name: str = Field(..., min_length=1, max_length=200)


class PriceListCommitRequest(BaseSchema):
    """Confirm a reviewed price list."""

    supplier_name: Optional[str] = Field(None, description="Overrides the detected supplier")
    quote_date: Optional[date] = Field(None, description="Date the prices were quoted (default today)")
    logged_by: str = Field(default="", max_length=100)


class PriceListCommitResponse(BaseSchema):
    """Result of a price-list commit."""

    supplier: str
    rows_inserted: int
