"""Order schema definitions."""

from typing import List

from pydantic import BaseModel, Field, StrictInt

from config import MAX_DB_INTEGER


class Order(BaseModel):
    id: str
    user_id: str
    product_id: str
    quantity: int
    total_price: float = Field(description="Unit price at order time times quantity.")
    status: str
    delivery_address: str
    created_at: str
    updated_at: str


class CreateOrderRequest(BaseModel):
    product_id: str
    quantity: StrictInt = Field(default=1, le=MAX_DB_INTEGER)
    delivery_address: str = ""


class UpdateOrderStatusRequest(BaseModel):
    status: str


class OrderPage(BaseModel):
    page: int
    limit: int
    total: int
    items: List[Order]
