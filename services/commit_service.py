"""
Commit service: writes reviewed staging lists to the record store.

Orders go to the Orders table (one row per item, shared DO number);
supplier prices go to the PriceList table.

Order rows without a matched product block the commit. The caller must
resolve them or pass acknowledge_unresolved=True, which removes them
before the insert. Nothing is dropped silently.
"""

import random
from datetime import date, datetime, timezone
from typing import Optional

import structlog

from config import get_supabase_client
from models.catalog import CustomerRecord, ProductRecord
from models.staging import StagingKind
from services.staging_service import StagingList
from exceptions import (
    DatabaseError,
    EmptyStagingError,
    MissingCustomerError,
    MissingDeliveryDateError,
    MissingSupplierError,
    UnresolvedItemsError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

ORDER_STATUS_PENDING = "Pending"
PASTED_NOTE_PREFIX = "Pasted: "


def generate_do_number(delivery_date: date, rng: Optional[random.Random] = None) -> str:
    """
    Delivery-order number: DO-YYMMDD-NNNN.

    - 2026-02-24 → "DO-260224-4821"
    """
    suffix = (rng or random).randint(1000, 9999)
    return f"DO-{delivery_date.strftime('%y%m%d')}-{suffix}"


class CommitService:
    """
    Persists confirmed staging lists.

    The staging list is closed (mark_committed) only after the insert
    succeeded, so a failed commit can be retried.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.orders_table = "Orders"
        self.price_table = "PriceList"

    # ===================
    # ORDERS
    # ===================

    def commit_order(
        self,
        staging: StagingList,
        customer: Optional[CustomerRecord],
        catalog: dict[str, ProductRecord],
        delivery_date: Optional[date] = None,
        logged_by: str = "",
        acknowledge_unresolved: bool = False,
    ) -> dict:
        """
        Insert a reviewed order.

        Args:
            staging: Open order staging list
            customer: Selected customer
            catalog: Products by code (for the "Order Items" name)
            delivery_date: Delivery date (defaults to the staged date)
            logged_by: User committing the order
            acknowledge_unresolved: Remove unmatched rows instead of blocking

        Returns:
            {"do_number", "rows_inserted", "removed_unresolved", "rows"}

        Raises:
            MissingCustomerError: No customer selected
            MissingDeliveryDateError: No delivery date
            EmptyStagingError: Nothing to insert
            UnresolvedItemsError: Unmatched rows and no acknowledgement
            DatabaseError: Insert failed
        """
        if staging.kind != StagingKind.ORDER:
            raise ValidationError(
                message="Staging list is not an order",
                code="WRONG_STAGING_KIND",
                details={"kind": staging.kind.value},
            )
        staging.ensure_open()

        if customer is None:
            raise MissingCustomerError()

        delivery_date = delivery_date or staging.delivery_date
        if delivery_date is None:
            raise MissingDeliveryDateError()

        if len(staging) == 0:
            raise EmptyStagingError("order")

        unresolved = staging.unresolved_items()
        if unresolved and not acknowledge_unresolved:
            raise UnresolvedItemsError(
                [i.model_dump(mode="json") for i in unresolved]
            )

        # Unresolved rows stay staged until the insert succeeds
        resolved = [i for i in staging if i.is_resolved]
        if not resolved:
            raise EmptyStagingError("order")

        do_number = generate_do_number(delivery_date)
        customer_name = customer.display_name.upper()
        timestamp = datetime.now(timezone.utc).isoformat()

        rows = []
        for item in resolved:
            product = catalog.get(item.matched_product_code)
            rows.append({
                "Timestamp": timestamp,
                "Status": ORDER_STATUS_PENDING,
                "DONumber": do_number,
                "Delivery Date": delivery_date.isoformat(),
                "Customer Name": customer_name,
                "Delivery Address": customer.delivery_address,
                "Contact Person": customer.contact_person or "",
                "Contact Number": customer.contact_number or "",
                "Product Code": item.matched_product_code,
                "Order Items": product.name if product else item.matched_product_code,
                "Quantity": float(item.quantity),
                "UOM": item.uom,
                "Price": float(item.price),
                "LoggedBy": logged_by,
                "SpecialNotes": f"{PASTED_NOTE_PREFIX}{item.raw_line}",
            })

        try:
            self.db.table(self.orders_table).insert(rows).execute()
        except Exception as e:
            logger.error(
                "order_commit_failed",
                staging_id=staging.staging_id,
                do_number=do_number,
                error=str(e)
            )
            raise DatabaseError("insert", str(e))

        removed = staging.remove_unresolved() if unresolved else []
        staging.mark_committed()

        logger.info(
            "order_committed",
            staging_id=staging.staging_id,
            do_number=do_number,
            customer=customer_name,
            rows=len(rows),
            removed_unresolved=len(removed)
        )

        return {
            "do_number": do_number,
            "rows_inserted": len(rows),
            "removed_unresolved": len(removed),
            "rows": rows,
        }

    def get_order_rows(self, do_number: str) -> list[dict]:
        """
        Read back the rows of one delivery order.

        Args:
            do_number: DO number returned by commit_order

        Returns:
            Order rows (empty if unknown)
        """
        try:
            result = (
                self.db.table(self.orders_table)
                .select("*")
                .eq("DONumber", do_number)
                .execute()
            )
            return result.data or []
        except Exception as e:
            logger.error("get_order_rows_failed", do_number=do_number, error=str(e))
            raise DatabaseError("select", str(e))

    # ===================
    # PRICE LISTS
    # ===================

    def commit_price_list(
        self,
        staging: StagingList,
        supplier_name: Optional[str] = None,
        quote_date: Optional[date] = None,
        logged_by: str = "",
    ) -> dict:
        """
        Insert staged supplier prices.

        Every staged price row is already matched, so there is no
        unresolved check here.

        Returns:
            {"supplier", "rows_inserted", "rows"}

        Raises:
            MissingSupplierError: No supplier selected or detected
            EmptyStagingError: Nothing to insert
            DatabaseError: Insert failed
        """
        if staging.kind != StagingKind.PRICE_LIST:
            raise ValidationError(
                message="Staging list is not a price list",
                code="WRONG_STAGING_KIND",
                details={"kind": staging.kind.value},
            )
        staging.ensure_open()

        supplier_name = (supplier_name or staging.supplier_name or "").strip()
        if not supplier_name:
            raise MissingSupplierError()

        if len(staging) == 0:
            raise EmptyStagingError("price list")

        quote_date = quote_date or date.today()
        timestamp = datetime.now(timezone.utc).isoformat()

        rows = [
            {
                "Timestamp": timestamp,
                "Supplier": supplier_name,
                "ProductCode": item.matched_product_code,
                "ProductName": item.matched_product_name,
                "UOM": item.uom,
                "Price": float(item.price),
                "QuoteDate": quote_date.isoformat(),
                "LoggedBy": logged_by,
                "SourceLine": item.raw_line,
            }
            for item in staging
        ]

        try:
            self.db.table(self.price_table).insert(rows).execute()
        except Exception as e:
            logger.error(
                "price_list_commit_failed",
                staging_id=staging.staging_id,
                supplier=supplier_name,
                error=str(e)
            )
            raise DatabaseError("insert", str(e))

        staging.mark_committed()

        logger.info(
            "price_list_committed",
            staging_id=staging.staging_id,
            supplier=supplier_name,
            rows=len(rows)
        )

        return {
            "supplier": supplier_name,
            "rows_inserted": len(rows),
            "rows": rows,
        }


# Singleton instance for convenience
_commit_service: Optional[CommitService] = None

def get_commit_service() -> CommitService:
    """Get or create CommitService instance."""
    global _commit_service
    if _commit_service is None:
        _commit_service = CommitService()
    return _commit_service
