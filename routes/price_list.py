"""
Supplier price-list API routes.

Paste a supplier's price list, review the matched prices, then commit
them to the PriceList table. Lines that match no product are not staged.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from config import settings
from models.quick_paste import (
    PriceListPasteRequest,
    PriceListPasteResponse,
    StagingItemUpdate,
    SupplierSelectRequest,
    PriceListCommitRequest,
    PriceListCommitResponse,
)
from models.staging import ParsedPriceItem, StagingKind, StagingSnapshot
from services import staging_cache_service
from services.catalog_service import get_catalog_service
from services.commit_service import get_commit_service
from services.price_list_service import get_price_list_service
from services.staging_service import StagingList
from exceptions import AppError, StagingNotFoundError

router = APIRouter(prefix="/api/price-list", tags=["Price List"])
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


def _get_price_staging(staging_id: str) -> StagingList:
    """Cached price-list staging list, or StagingNotFoundError."""
    staging = staging_cache_service.retrieve_staging(staging_id)
    if staging is None or staging.kind != StagingKind.PRICE_LIST:
        raise StagingNotFoundError(staging_id)
    return staging


@router.post("/parse", response_model=PriceListPasteResponse)
async def parse_price_list(request: PriceListPasteRequest):
    """
    Parse a pasted supplier price list.

    Only lines with a pack token, a positive price and a matching catalog
    product are staged.
    """
    try:
        catalog = get_catalog_service()

        result = get_price_list_service().parse(
            request.text,
            catalog.get_products(),
            suppliers=catalog.get_suppliers(),
        )

        staging_cache_service.store_staging(
            result.staging, ttl_minutes=settings.staging_ttl_minutes
        )

        return PriceListPasteResponse(
            staging_id=result.staging.staging_id,
            supplier=result.supplier,
            items=list(result.staging.items),
            item_count=len(result.staging),
            dropped_count=result.dropped_count,
            expires_in_minutes=settings.staging_ttl_minutes,
        )

    except Exception as e:
        logger.error("price_list_paste_failed", error=str(e))
        return _handle_error(e)


@router.get("/{staging_id}", response_model=StagingSnapshot)
async def get_staging(staging_id: str):
    """Current state of a price-list staging list."""
    try:
        return _get_price_staging(staging_id).snapshot()
    except Exception as e:
        return _handle_error(e)


@router.patch("/{staging_id}/items/{item_id}", response_model=ParsedPriceItem)
async def update_item(staging_id: str, item_id: str, update: StagingItemUpdate):
    """Edit the pack token, price or matched product of one row."""
    try:
        staging = _get_price_staging(staging_id)
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
        _get_price_staging(staging_id).remove_item(item_id)
        return None
    except Exception as e:
        return _handle_error(e)


@router.put("/{staging_id}/supplier", response_model=StagingSnapshot)
async def select_supplier(staging_id: str, request: SupplierSelectRequest):
    """Manually set the supplier the prices came from."""
    try:
        staging = _get_price_staging(staging_id)
        staging.ensure_open()
        staging.supplier_name = request.supplier_name
        logger.info("supplier_selected", staging_id=staging_id, supplier=request.supplier_name)
        return staging.snapshot()
    except Exception as e:
        return _handle_error(e)


@router.post("/{staging_id}/commit", response_model=PriceListCommitResponse)
async def commit_price_list(staging_id: str, request: Optional[PriceListCommitRequest] = None):
    """Write the staged prices to the PriceList table."""
    try:
        request = request or PriceListCommitRequest()
        staging = _get_price_staging(staging_id)

        result = get_commit_service().commit_price_list(
            staging,
            supplier_name=request.supplier_name,
            quote_date=request.quote_date,
            logged_by=request.logged_by,
        )

        return PriceListCommitResponse(
            supplier=result["supplier"],
            rows_inserted=result["rows_inserted"],
        )
    except Exception as e:
        return _handle_error(e)


@router.delete("/{staging_id}", status_code=204)
async def discard_staging(staging_id: str):
    """Discard a price-list staging list."""
    try:
        staging = _get_price_staging(staging_id)
        staging.discard()
        staging_cache_service.delete_staging(staging_id)
        return None
    except Exception as e:
        return _handle_error(e)
