"""
Base schemas for all models.

Staging rows rely on validate_assignment: an edit like
item.quantity = "2.5" is coerced to Decimal("2.5") on assignment.
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate (and coerce) on attribute assignment
        - Allow ORM objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )
