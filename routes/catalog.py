"""
Catalog API routes.

Read-only registries used by the review screen for manual selection.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.catalog import CustomerRecord, ProductRecord, SupplierRecord
from services.catalog_service import get_catalog_service
from exceptions import AppError

router = APIRouter(prefix="/api/catalog", tags=["Catalog"])
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


@router.get("/customers", response_model=list[CustomerRecord])
async def list_customers():
    """All customer outlets, for the customer picker."""
    try:
        return get_catalog_service().get_customers()
    except Exception as e:
        return _handle_error(e)


@router.get("/customers/{customer_id}", response_model=CustomerRecord)
async def get_customer(customer_id: str):
    """One customer outlet."""
    try:
        return get_catalog_service().get_customer(customer_id)
    except Exception as e:
        return _handle_error(e)


@router.get("/products", response_model=list[ProductRecord])
async def list_products():
    """The product catalog, for the product picker."""
    try:
        return get_catalog_service().get_products()
    except Exception as e:
        return _handle_error(e)


@router.get("/suppliers", response_model=list[SupplierRecord])
async def list_suppliers():
    """All suppliers."""
    try:
        return get_catalog_service().get_suppliers()
    except Exception as e:
        return _handle_error(e)
