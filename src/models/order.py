from sqlalchemy import CheckConstraint, Column, Float, ForeignKey, Integer, String
from .base import Base


class OrderModel(Base):
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_orders_quantity_positive"),
    )

    order_id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.user_id"), index=True, nullable=False)
    # No foreign key: deleting a product keeps the orders that reference it
    product_id = Column(String, index=True, nullable=False)
    quantity = Column(Integer, nullable=False)
    total_price = Column(Float, nullable=False)  # unit price snapshot * quantity
    status = Column(String, nullable=False, default="pending")
    delivery_address = Column(String, nullable=False, default="")
    created_at = Column(String, index=True, nullable=False)
    updated_at = Column(String, nullable=False)
