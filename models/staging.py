"""
Staging schemas: the reviewable rows produced by the quick-paste parsers.

Rows stay editable until the staging list is committed or discarded.
An order row with matched_product_code=None is unresolved and must be
fixed or explicitly removed before commit.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Any
from decimal import Decimal, InvalidOperation
from enum import Enum
from datetime import date
import uuid

from models.base import BaseSchema


def _new_item_id() -> str:
    return uuid.uuid4().hex[:12]


def _to_decimal(v: Any, default: Decimal) -> Decimal:
    """Coerce edited values ("2", 2.5, "", None) to Decimal."""
    if v is None or (isinstance(v, str) and not v.strip()):
        return default
    if isinstance(v, float):
        v = repr(v)
    try:
        return Decimal(str(v).strip())
    except InvalidOperation:
        raise ValueError(f"Not a number: {v!r}")


class StagingStatus(str, Enum):
    """Lifecycle of a staging list."""
    OPEN = "open"
    COMMITTED = "committed"
    DISCARDED = "discarded"


class StagingKind(str, Enum):
    """Which pipeline produced the staging list."""
    ORDER = "order"
    PRICE_LIST = "price_list"


class RawLine(BaseModel):
    """One line of pasted text with its position."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0, description="0-based line position after blank lines are removed")
    text: str = Field(..., description="Trimmed line text")


class ParsedOrderItem(BaseSchema):
    """
    One staged order row.

    quantity/uom/price are pre-filled by the parser and freely editable.
    """

    id: str = Field(default_factory=_new_item_id, description="Row id within the staging list")
    line_index: Optional[int] = Field(None, description="Source line position (None for manual rows)")
    raw_line: str = Field(..., description="Original pasted line (provenance)")
    quantity: Decimal = Field(default=Decimal("1"), description="Ordered quantity")
    uom: str = Field(default="", description="Unit of measure")
    price: Decimal = Field(default=Decimal("0"), description="Unit price, 0 when not given")
    matched_product_code: Optional[str] = Field(None, description="Resolved product code, None = unresolved")
    match_score: Optional[float] = Field(None, description="Fuzzy score of the automatic match")

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, v: Any) -> Decimal:
        return _to_decimal(v, Decimal("1"))

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v: Any) -> Decimal:
        return _to_decimal(v, Decimal("0"))

    @field_validator("uom", mode="before")
    @classmethod
    def uom_uppercase(cls, v: Any) -> str:
        return str(v or "").strip().upper()

    @field_validator("matched_product_code", mode="before")
    @classmethod
    def blank_code_is_unresolved(cls, v: Any) -> Optional[str]:
        """The review screen clears a match by sending an empty string."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return str(v)

    @property
    def is_resolved(self) -> bool:
        return self.matched_product_code is not None


class ParsedPriceItem(BaseSchema):
    """
    One staged supplier price row.

    Only created when both a product and a positive price were found,
    so there is no unresolved state.
    """

    id: str = Field(default_factory=_new_item_id, description="Row id within the staging list")
    line_index: Optional[int] = Field(None, description="Source line position")
    raw_line: str = Field(..., description="Original pasted line (provenance)")
    matched_product_code: str = Field(..., min_length=1, description="Matched product code")
    matched_product_name: str = Field(..., description="Matched product name")
    uom: str = Field(..., description="Raw pack/unit token, e.g. '80g x 50pkt'")
    price: Decimal = Field(..., description="Quoted unit cost")
    match_score: Optional[float] = Field(None, description="Fuzzy score of the match")

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v: Any) -> Decimal:
        return _to_decimal(v, Decimal("0"))


class StagingSnapshot(BaseSchema):
    """Serializable view of a staging list."""

    staging_id: str
    kind: StagingKind
    status: StagingStatus
    items: list[dict] = Field(default_factory=list)
    item_count: int = 0
    resolved_count: int = 0
    unresolved_count: int = 0
    customer_id: Optional[str] = None
    delivery_date: Optional[date] = None
    supplier_name: Optional[str] = None
