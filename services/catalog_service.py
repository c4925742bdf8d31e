"""
Catalog service: loads the customer, product and supplier registries.

The parsers work on in-memory lists; this service is the only place that
reads them from the database.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.catalog import CustomerRecord, ProductRecord, SupplierRecord
from exceptions import (
    CustomerNotFoundError,
    ProductNotFoundError,
    DatabaseError
)

logger = structlog.get_logger(__name__)


class CatalogService:
    """
    Registry reads for quick-paste parsing.

    Tables keep the original spreadsheet column names.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.customers_table = "Customers"
        self.products_table = "ProductMaster"
        self.suppliers_table = "Suppliers"

    # ===================
    # CUSTOMERS
    # ===================

    def get_customers(self) -> list[CustomerRecord]:
        """
        Get every customer outlet, ordered by company name.

        Returns:
            List of CustomerRecord
        """
        logger.debug("getting_customers")

        try:
            result = (
                self.db.table(self.customers_table)
                .select("*")
                .order("CompanyName")
                .execute()
            )
        except Exception as e:
            logger.error("get_customers_failed", error=str(e))
            raise DatabaseError("select", str(e))

        customers = []
        for row in result.data:
            if not row.get("CompanyName"):
                logger.warning("customer_without_name_skipped", customer_id=row.get("id"))
                continue
            customers.append(CustomerRecord.from_row(row))

        logger.info("customers_retrieved", count=len(customers))
        return customers

    def get_customer(self, customer_id: str) -> CustomerRecord:
        """
        Get one customer by id.

        Raises:
            CustomerNotFoundError: If the customer doesn't exist
        """
        logger.debug("getting_customer", customer_id=customer_id)

        try:
            result = (
                self.db.table(self.customers_table)
                .select("*")
                .eq("id", customer_id)
                .execute()
            )
        except Exception as e:
            logger.error("get_customer_failed", customer_id=customer_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise CustomerNotFoundError(customer_id)

        return CustomerRecord.from_row(result.data[0])

    # ===================
    # PRODUCTS
    # ===================

    def get_products(self) -> list[ProductRecord]:
        """
        Get the product catalog, ordered by product name.

        Returns:
            List of ProductRecord
        """
        logger.debug("getting_products")

        try:
            result = (
                self.db.table(self.products_table)
                .select("*")
                .order("ProductName")
                .execute()
            )
        except Exception as e:
            logger.error("get_products_failed", error=str(e))
            raise DatabaseError("select", str(e))

        products = []
        for row in result.data:
            if not row.get("ProductCode") or not row.get("ProductName"):
                logger.warning("product_incomplete_skipped", product_code=row.get("ProductCode"))
                continue
            products.append(ProductRecord.from_row(row))

        logger.info("products_retrieved", count=len(products))
        return products

    def get_product_index(self) -> dict[str, ProductRecord]:
        """Products keyed by code."""
        return {p.code: p for p in self.get_products()}

    def get_product(self, product_code: str) -> ProductRecord:
        """
        Get one product by code.

        Raises:
            ProductNotFoundError: If the product doesn't exist
        """
        product = self.get_product_index().get(product_code)
        if product is None:
            raise ProductNotFoundError(product_code)
        return product

    # ===================
    # SUPPLIERS
    # ===================

    def get_suppliers(self) -> list[SupplierRecord]:
        """Get every supplier, ordered by name."""
        logger.debug("getting_suppliers")

        try:
            result = (
                self.db.table(self.suppliers_table)
                .select("*")
                .order("SupplierName")
                .execute()
            )
        except Exception as e:
            logger.error("get_suppliers_failed", error=str(e))
            raise DatabaseError("select", str(e))

        suppliers = [
            SupplierRecord.from_row(row)
            for row in result.data
            if row.get("SupplierName")
        ]
        logger.info("suppliers_retrieved", count=len(suppliers))
        return suppliers


# Singleton instance for convenience
_catalog_service: Optional[CatalogService] = None

def get_catalog_service() -> CatalogService:
    """Get or create CatalogService instance."""
    global _catalog_service
    if _catalog_service is None:
        _catalog_service = CatalogService()
    return _catalog_service
