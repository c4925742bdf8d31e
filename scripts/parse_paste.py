"""
Parse a pasted order or price list from a text file and print the result.

Useful for checking how a real WhatsApp message is read before changing
the matching weights or the UOM vocabulary.

Usage:
    # Against the live catalog
    python scripts/parse_paste.py order.txt

    # Against a catalog exported to JSON ({"customers": [...], "products": [...],
    # "suppliers": [...]}, rows in table column format)
    python scripts/parse_paste.py order.txt --catalog catalog.json

    # Supplier price list
    python scripts/parse_paste.py prices.txt --price-list --catalog catalog.json
"""

import argparse
import json
import os
import sys

# Allow imports from the project root when running as a script
_root_dir = os.path.join(os.path.dirname(__file__), "..")
sys.path.insert(0, _root_dir)

from dotenv import load_dotenv
load_dotenv(os.path.join(_root_dir, ".env"))

from models.catalog import CustomerRecord, ProductRecord, SupplierRecord


def load_catalog_file(path: str) -> tuple[list, list, list]:
    """Read customers/products/suppliers from a JSON export."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    customers = [CustomerRecord.from_row(r) for r in data.get("customers", [])]
    products = [ProductRecord.from_row(r) for r in data.get("products", [])]
    suppliers = [SupplierRecord.from_row(r) for r in data.get("suppliers", [])]
    return customers, products, suppliers


def load_live_catalog() -> tuple[list, list, list]:
    """Read the registries from the database."""
    from services.catalog_service import get_catalog_service

    catalog = get_catalog_service()
    return catalog.get_customers(), catalog.get_products(), catalog.get_suppliers()


def print_order(result, products_by_code: dict) -> None:
    print("=" * 60)
    if result.customer:
        print(f"CUSTOMER: {result.customer.display_name} (score {result.customer_score})")
    else:
        print("CUSTOMER: -- not detected --")
    print(f"DELIVERY: {result.delivery_date}"
          + (" (from paste)" if result.delivery_date_override else " (default)"))
    print("=" * 60)

    for item in result.staging:
        product = products_by_code.get(item.matched_product_code)
        name = product.name if product else "?? UNRESOLVED"
        print(f"  {item.quantity:>6} {item.uom:<6} {name:<30} "
              f"RM{item.price:<8} <- {item.raw_line}")

    print("-" * 60)
    print(f"  {result.resolved_count} resolved, {result.unresolved_count} unresolved")


def print_price_list(result) -> None:
    print("=" * 60)
    print(f"SUPPLIER: {result.supplier.name if result.supplier else '-- not detected --'}")
    print("=" * 60)

    for item in result.staging:
        print(f"  {item.matched_product_name:<30} {item.uom:<14} "
              f"RM{item.price:<8} <- {item.raw_line}")

    print("-" * 60)
    print(f"  {len(result.staging)} staged, {result.dropped_count} lines dropped")


def main():
    parser = argparse.ArgumentParser(
        description="Parse a pasted order or price list and print the staged rows."
    )
    parser.add_argument("file", help="Text file with the pasted message")
    parser.add_argument(
        "--catalog",
        default="",
        help="JSON catalog export to use instead of the database",
    )
    parser.add_argument(
        "--price-list",
        action="store_true",
        help="Treat the text as a supplier price list",
    )

    args = parser.parse_args()

    if not os.path.exists(args.file):
        print(f"ERROR: File not found: {args.file}")
        sys.exit(1)

    with open(args.file, encoding="utf-8") as f:
        text = f.read()

    if args.catalog:
        customers, products, suppliers = load_catalog_file(args.catalog)
    else:
        customers, products, suppliers = load_live_catalog()

    if args.price_list:
        from services.price_list_service import PriceListService
        print_price_list(PriceListService().parse(text, products, suppliers=suppliers))
    else:
        from services.order_parse_service import OrderParseService
        fetcher = None
        if not args.catalog:
            from services.order_history_service import get_order_history_service
            fetcher = get_order_history_service().fetch_recent_product_codes
        result = OrderParseService().parse(
            text, customers, products, fetch_recent_product_codes=fetcher
        )
        print_order(result, {p.code: p for p in products})


if __name__ == "__main__":
    main()
