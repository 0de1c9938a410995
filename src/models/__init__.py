from .auth_session import AuthSessionModel
from .order import OrderModel
from .product import ProductModel
from .user import UserModel

__all__ = ["AuthSessionModel", "OrderModel", "ProductModel", "UserModel"]
