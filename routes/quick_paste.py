"""
Quick-paste order API routes.

Paste a WhatsApp order, review the staged rows, then commit.

Follows the preview-then-confirm pattern: nothing is written until
/commit is called, and the staging list lives in memory until then.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from config import settings
from models.quick_paste import (
    OrderPasteRequest,
    OrderPasteResponse,
    StagingItemUpdate,
    CustomerSelectRequest,
    OrderCommitRequest,
    OrderCommitResponse,
)
from models.staging import ParsedOrderItem, StagingKind, StagingSnapshot
from services import staging_cache_service
from services.catalog_service import get_catalog_service
from services.commit_service import get_commit_service
from services.order_history_service import get_order_history_service
from services.order_parse_service import get_order_parse_service
from services.staging_service import StagingList
from exceptions import AppError, StagingNotFoundError

router = APIRouter(prefix="/api/quick-paste", tags=["Quick Paste"])
logger = structlog.get_logger(__name__)


def _handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


def _get_order_staging(staging_id: str) -> StagingList:
    """Cached order staging list, or StagingNotFoundError."""
    staging = staging_cache_service.retrieve_staging(staging_id)
    if staging is None or staging.kind != StagingKind.ORDER:
        raise StagingNotFoundError(staging_id)
    return staging


@router.post("/parse", response_model=OrderPasteResponse)
async def parse_order(request: OrderPasteRequest):
    """
    Parse a pasted order into a staging list.

    Detects the customer from line 1, a delivery date from any date line,
    and matches every item line against the product catalog. Nothing is
    saved until /{staging_id}/commit is called.
    """
    try:
        catalog = get_catalog_service()
        customers = catalog.get_customers()
        products = catalog.get_products()

        result = get_order_parse_service().parse(
            request.text,
            customers,
            products,
            fetch_recent_product_codes=get_order_history_service().fetch_recent_product_codes,
        )

        staging_cache_service.store_staging(
            result.staging, ttl_minutes=settings.staging_ttl_minutes
        )

        return OrderPasteResponse(
            staging_id=result.staging.staging_id,
            customer=result.customer,
            customer_score=result.customer_score,
            delivery_date=result.delivery_date,
            delivery_date_override=result.delivery_date_override,
            items=list(result.staging.items),
            item_count=len(result.staging),
            resolved_count=result.resolved_count,
            unresolved_count=result.unresolved_count,
            has_unresolved=result.has_unresolved,
            expires_in_minutes=settings.staging_ttl_minutes,
        )

    except Exception as e:
        logger.error("order_paste_failed", error=str(e))
        return _handle_error(e)


@router.get("/{staging_id}", response_model=StagingSnapshot)
async def get_staging(staging_id: str):
    """Current state of a staging list."""
    try:
        return _get_order_staging(staging_id).snapshot()
    except Exception as e:
        return _handle_error(e)


@router.post("/{staging_id}/items", response_model=ParsedOrderItem, status_code=201)
async def add_blank_item(staging_id: str):
    """Add an empty row (qty 1, default UOM, no product) for a missed item."""
    try:
        return _get_order_staging(staging_id).add_blank_row()
    except Exception as e:
        return _handle_error(e)


@router.patch("/{staging_id}/items/{item_id}", response_model=ParsedOrderItem)
async def update_item(staging_id: str, item_id: str, update: StagingItemUpdate):
    """
    Edit quantity, UOM, price or the matched product of one row.

    Choosing a product also sets the row's UOM to the product's base unit.
    """
    try:
        staging = _get_order_staging(staging_id)
        changes = update.model_dump(exclude_unset=True)

        catalog_index = None
        if "matched_product_code" in changes:
            catalog_index = get_catalog_service().get_product_index()

        return staging.update_item(item_id, changes, catalog_index)
    except Exception as e:
        return _handle_error(e)


@router.delete("/{staging_id}/items/{item_id}", status_code=204)
async def remove_item(staging_id: str, item_id: str):
    """Remove one row."""
    try:
        _get_order_staging(staging_id).remove_item(item_id)
        return None
    except Exception as e:
        return _handle_error(e)


@router.put("/{staging_id}/customer", response_model=StagingSnapshot)
async def select_customer(staging_id: str, request: CustomerSelectRequest):
    """Manually pick the customer when line 1 did not match."""
    try:
        staging = _get_order_staging(staging_id)
        staging.ensure_open()
        customer = get_catalog_service().get_customer(request.customer_id)
        staging.customer_id = customer.id

        logger.info(
            "customer_selected",
            staging_id=staging_id,
            customer_id=customer.id,
            customer=customer.display_name
        )
        return staging.snapshot()
    except Exception as e:
        return _handle_error(e)


@router.post("/{staging_id}/commit", response_model=OrderCommitResponse)
async def commit_order(staging_id: str, request: Optional[OrderCommitRequest] = None):
    """
    Write the reviewed order to the Orders table.

    Blocked with UNRESOLVED_ITEMS (422) while rows lack a product, unless
    acknowledge_unresolved is true, which removes those rows first.
    """
    try:
        request = request or OrderCommitRequest()
        staging = _get_order_staging(staging_id)
        catalog = get_catalog_service()

        customer = catalog.get_customer(staging.customer_id) if staging.customer_id else None

        result = get_commit_service().commit_order(
            staging,
            customer,
            catalog.get_product_index(),
            delivery_date=request.delivery_date,
            logged_by=request.logged_by,
            acknowledge_unresolved=request.acknowledge_unresolved,
        )

        first_row = result["rows"][0]
        return OrderCommitResponse(
            do_number=result["do_number"],
            customer_name=first_row["Customer Name"],
            delivery_date=first_row["Delivery Date"],
            rows_inserted=result["rows_inserted"],
            removed_unresolved=result["removed_unresolved"],
        )
    except Exception as e:
        return _handle_error(e)


@router.delete("/{staging_id}", status_code=204)
async def discard_staging(staging_id: str):
    """Discard a staging list without committing."""
    try:
        staging = _get_order_staging(staging_id)
        staging.discard()
        staging_cache_service.delete_staging(staging_id)
        return None
    except Exception as e:
        return _handle_error(e)
