"""
Staging list: the editable result of one quick-paste parse.

A StagingList holds the parsed rows until a person has reviewed them.
Rows can be edited, added and removed while the list is open; commit or
discard closes it and every further edit raises StagingClosedError.

Edits only coerce types (quantity "2" → Decimal("2")); they never
re-run matching.
"""

import uuid
from datetime import date
from typing import Any, Optional, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from config.parsing import FALLBACK_UOM
from models.catalog import ProductRecord
from models.staging import (
    ParsedOrderItem,
    ParsedPriceItem,
    StagingKind,
    StagingSnapshot,
    StagingStatus,
)
from exceptions import (
    ProductNotFoundError,
    StagingClosedError,
    StagingItemNotFoundError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

StagedItem = Union[ParsedOrderItem, ParsedPriceItem]

MANUAL_ENTRY_LINE = "Manual Entry"

ORDER_EDITABLE_FIELDS = {"quantity", "uom", "price", "matched_product_code"}
PRICE_EDITABLE_FIELDS = {"uom", "price", "matched_product_code"}


class StagingList:
    """
    Ordered, editable rows of one parse.

    Also carries the order header being reviewed alongside the rows:
    the selected customer and delivery date for orders, the supplier for
    price lists.
    """

    def __init__(
        self,
        kind: StagingKind = StagingKind.ORDER,
        items: Optional[list[StagedItem]] = None,
        staging_id: Optional[str] = None,
        default_uom: str = FALLBACK_UOM,
    ):
        self.staging_id = staging_id or str(uuid.uuid4())
        self.default_uom = default_uom
        self.kind = kind
        self.status = StagingStatus.OPEN
        self.items: list[StagedItem] = list(items or [])
        self.customer_id: Optional[str] = None
        self.delivery_date: Optional[date] = None
        self.supplier_name: Optional[str] = None

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    # ===================
    # STATE
    # ===================

    @property
    def is_open(self) -> bool:
        return self.status == StagingStatus.OPEN

    def ensure_open(self) -> None:
        if not self.is_open:
            raise StagingClosedError(self.staging_id, self.status.value)

    def mark_committed(self) -> None:
        """Close the list after a successful commit."""
        self.ensure_open()
        self.status = StagingStatus.COMMITTED
        logger.info("staging_committed", staging_id=self.staging_id, items=len(self.items))

    def discard(self) -> None:
        """Close the list without committing."""
        self.ensure_open()
        self.status = StagingStatus.DISCARDED
        logger.info("staging_discarded", staging_id=self.staging_id, items=len(self.items))

    # ===================
    # READ
    # ===================

    def get_item(self, item_id: str) -> StagedItem:
        """
        Get one row by id.

        Raises:
            StagingItemNotFoundError: If the row does not exist
        """
        for item in self.items:
            if item.id == item_id:
                return item
        raise StagingItemNotFoundError(item_id)

    def unresolved_items(self) -> list[ParsedOrderItem]:
        """Order rows with no matched product (price rows are always resolved)."""
        return [i for i in self.items if i.matched_product_code is None]

    @property
    def resolved_count(self) -> int:
        return sum(1 for i in self.items if i.matched_product_code is not None)

    @property
    def unresolved_count(self) -> int:
        return len(self.items) - self.resolved_count

    @property
    def has_unresolved(self) -> bool:
        return self.unresolved_count > 0

    def snapshot(self) -> StagingSnapshot:
        """Serializable view for API responses."""
        return StagingSnapshot(
            staging_id=self.staging_id,
            kind=self.kind,
            status=self.status,
            items=[i.model_dump(mode="json") for i in self.items],
            item_count=len(self.items),
            resolved_count=self.resolved_count,
            unresolved_count=self.unresolved_count,
            customer_id=self.customer_id,
            delivery_date=self.delivery_date,
            supplier_name=self.supplier_name,
        )

    # ===================
    # EDITS
    # ===================

    def add_item(self, item: StagedItem) -> StagedItem:
        """Append a parsed row."""
        self.ensure_open()
        self.items.append(item)
        return item

    def add_blank_row(self) -> ParsedOrderItem:
        """
        Append an empty order row for a product the parser missed.

        Returns:
            The new row (qty 1, default UOM, price 0, unmatched)
        """
        self.ensure_open()
        if self.kind != StagingKind.ORDER:
            raise ValidationError(
                message="Blank rows can only be added to orders",
                code="BLANK_ROW_NOT_ALLOWED",
                details={"kind": self.kind.value},
            )

        item = ParsedOrderItem(
            raw_line=MANUAL_ENTRY_LINE,
            quantity=1,
            uom=self.default_uom,
            price=0,
        )
        self.items.append(item)
        logger.debug("staging_row_added", staging_id=self.staging_id, item_id=item.id)
        return item

    def remove_item(self, item_id: str) -> StagedItem:
        """
        Remove one row.

        Raises:
            StagingItemNotFoundError: If the row does not exist
        """
        self.ensure_open()
        item = self.get_item(item_id)
        self.items.remove(item)
        logger.debug("staging_row_removed", staging_id=self.staging_id, item_id=item_id)
        return item

    def remove_unresolved(self) -> list[ParsedOrderItem]:
        """Drop every row without a matched product, returning them."""
        self.ensure_open()
        removed = self.unresolved_items()
        self.items = [i for i in self.items if i.matched_product_code is not None]
        if removed:
            logger.info(
                "staging_unresolved_removed",
                staging_id=self.staging_id,
                count=len(removed),
            )
        return removed

    def update_item(
        self,
        item_id: str,
        changes: dict[str, Any],
        catalog: Optional[dict[str, ProductRecord]] = None,
    ) -> StagedItem:
        """
        Apply field edits to one row.

        Reassigning the product also resets the UOM to the new product's
        base unit; an explicit "uom" in the same edit still wins. Setting
        the product to empty/None marks an order row unresolved again.

        Args:
            item_id: Row id
            changes: Field -> new value
            catalog: Products by code, required to reassign a product

        Returns:
            The updated row

        Raises:
            StagingClosedError: If the list is no longer open
            StagingItemNotFoundError: If the row does not exist
            ProductNotFoundError: If the new product code is unknown
            ValidationError: Unknown field or a value that cannot be coerced
        """
        self.ensure_open()
        item = self.get_item(item_id)

        allowed = ORDER_EDITABLE_FIELDS if self.kind == StagingKind.ORDER else PRICE_EDITABLE_FIELDS
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(
                message=f"Cannot edit field(s): {', '.join(sorted(unknown))}",
                code="FIELD_NOT_EDITABLE",
                details={"fields": sorted(unknown)},
            )

        fields = sorted(changes)
        changes = dict(changes)
        try:
            if "matched_product_code" in changes:
                self._reassign_product(item, changes.pop("matched_product_code"), catalog)
            for field_name, value in changes.items():
                setattr(item, field_name, value)
        except PydanticValidationError as e:
            raise ValidationError(
                message="Invalid value for staged row",
                details={"item_id": item_id, "errors": [err["msg"] for err in e.errors()]},
            )

        logger.debug(
            "staging_row_updated",
            staging_id=self.staging_id,
            item_id=item_id,
            fields=fields,
        )
        return item

    def _reassign_product(
        self,
        item: StagedItem,
        product_code: Optional[str],
        catalog: Optional[dict[str, ProductRecord]],
    ) -> None:
        if product_code is None or not str(product_code).strip():
            if isinstance(item, ParsedPriceItem):
                raise ValidationError(
                    message="Price rows must keep a product",
                    code="PRODUCT_REQUIRED",
                    details={"item_id": item.id},
                )
            item.matched_product_code = None
            item.match_score = None
            return

        product_code = str(product_code).strip()
        product = (catalog or {}).get(product_code)
        if product is None:
            raise ProductNotFoundError(product_code)

        item.matched_product_code = product.code
        item.match_score = None
        if isinstance(item, ParsedPriceItem):
            item.matched_product_name = product.name
        else:
            item.uom = product.base_uom
