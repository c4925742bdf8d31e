"""
Customer, product and supplier records.

The record store keeps the original spreadsheet-style column names
(CompanyName, ProductCode, ...). from_row() maps a table row onto
these schemas; the parser only ever sees the schemas.
"""

from pydantic import Field, field_validator
from typing import Optional, Any

from models.base import BaseSchema


class CustomerRecord(BaseSchema):
    """
    A customer outlet from the Customers table.

    One company can have many branches; each branch is its own record.
    """

    id: str = Field(..., description="Customer row id")
    company_name: str = Field(..., min_length=1, description="Company name")
    branch: Optional[str] = Field(None, description="Branch / outlet name")
    contact_person: Optional[str] = Field(None, description="Person receiving deliveries")
    contact_number: Optional[str] = Field(None, description="Contact phone number")
    delivery_address: Optional[str] = Field(None, description="Delivery address")

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, v: Any) -> str:
        """Customers.id is numeric in the store; keep it as text here."""
        return str(v)

    @property
    def display_name(self) -> str:
        """'Company' or 'Company - Branch'."""
        if self.branch:
            return f"{self.company_name} - {self.branch}"
        return self.company_name

    @property
    def match_text(self) -> str:
        """Text scored against the first pasted line."""
        return f"{self.company_name} {self.branch or ''}".strip()

    @classmethod
    def from_row(cls, row: dict) -> "CustomerRecord":
        """Build from a Customers table row."""
        return cls(
            id=row["id"],
            company_name=row.get("CompanyName") or "",
            branch=row.get("Branch") or None,
            contact_person=row.get("ContactPerson") or None,
            contact_number=row.get("ContactNumber") or None,
            delivery_address=row.get("DeliveryAddress") or None,
        )


class ProductRecord(BaseSchema):
    """A catalog product from the ProductMaster table."""

    code: str = Field(..., min_length=1, description="Unique product code")
    name: str = Field(..., min_length=1, description="Product name")
    base_uom: str = Field(..., min_length=1, description="Default unit of measure")
    allowed_uoms: list[str] = Field(default_factory=list, description="Units the product is sold in")
    category: Optional[str] = Field(None, description="Product category")

    @field_validator("base_uom")
    @classmethod
    def uom_uppercase(cls, v: str) -> str:
        """UOM tokens are uppercase."""
        return v.upper()

    @field_validator("allowed_uoms", mode="before")
    @classmethod
    def split_allowed_uoms(cls, v: Any) -> list[str]:
        """AllowedUOMs is stored either as an array or a comma-separated string."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [str(u).strip().upper() for u in v if str(u).strip()]

    @classmethod
    def from_row(cls, row: dict) -> "ProductRecord":
        """Build from a ProductMaster table row."""
        base_uom = row.get("BaseUOM") or "KG"
        allowed = row.get("AllowedUOMs") or [base_uom]
        return cls(
            code=row["ProductCode"],
            name=row["ProductName"],
            base_uom=base_uom,
            allowed_uoms=allowed,
            category=row.get("Category"),
        )


class SupplierRecord(BaseSchema):
    """A supplier from the Suppliers table."""

    name: str = Field(..., min_length=1, description="Supplier name")

    @classmethod
    def from_row(cls, row: dict) -> "SupplierRecord":
        """Build from a Suppliers table row."""
        return cls(name=row["SupplierName"])
