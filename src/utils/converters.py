"""Conversions between SQLAlchemy models and pydantic schemas."""

from models.order import OrderModel
from models.product import ProductModel
from models.user import UserModel
from schemas.order import Order
from schemas.product import Product
from schemas.user import User


def user_to_model(user: User) -> UserModel:
    return UserModel(
        user_id=user.id,
        name=user.name,
        email=user.email,
        password_hash=user.password_hash,
        role=user.role,
        created_at=user.created_at,
    )


def model_to_user(model: UserModel) -> User:
    return User(
        id=model.user_id,
        name=model.name,
        email=model.email,
        password_hash=model.password_hash,
        role=model.role,
        created_at=model.created_at,
    )


def model_to_product(model: ProductModel) -> Product:
    return Product(
        id=model.product_id,
        name=model.name,
        price=model.price,
        quantity=model.quantity,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def model_to_order(model: OrderModel) -> Order:
    return Order(
        id=model.order_id,
        user_id=model.user_id,
        product_id=model.product_id,
        quantity=model.quantity,
        total_price=model.total_price,
        status=model.status,
        delivery_address=model.delivery_address,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )
