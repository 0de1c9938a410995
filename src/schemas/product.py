"""Product schema definitions."""

from typing import List

from pydantic import BaseModel, Field, StrictInt, field_validator

from config import MAX_DB_INTEGER


class Product(BaseModel):
    id: str
    name: str
    price: float
    quantity: int
    created_at: str
    updated_at: str


class ProductPayload(BaseModel):
    """Body of product create and update requests."""
    name: str = Field(description="Product name, must not be blank.")
    price: float = Field(ge=0, allow_inf_nan=False, description="Unit price.")
    quantity: StrictInt = Field(ge=0, le=MAX_DB_INTEGER, description="Units in stock.")

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


# Fields a caller may request through the ``fields`` projection
PROJECTABLE_FIELDS: List[str] = ["id", "name", "price", "quantity", "created_at", "updated_at"]

SORTABLE_FIELDS: List[str] = ["name", "price", "quantity", "created_at", "updated_at"]
