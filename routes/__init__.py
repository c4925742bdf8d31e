"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.quick_paste import router as quick_paste_router
from routes.price_list import router as price_list_router
from routes.catalog import router as catalog_router

__all__ = [
    "quick_paste_router",
    "price_list_router",
    "catalog_router",
]
