"""Order management utilities.

This module implements the order placement workflow together with order
listing, status transitions and deletion.

Placement reads the product, checks stock, decrements it with a single
conditional UPDATE and inserts the order. The decrement and the insert commit
in one transaction, so a failed insert never leaves stock decremented.
"""

import logging
from datetime import datetime

import pytz
from sqlalchemy.orm import Session

from config import MAX_DB_INTEGER, ORDER_STATUSES, ORDERS_DEFAULT_LIMIT, ORDERS_MAX_LIMIT
from core.authorization import Action, authorize, require_authenticated
from core.database import store_operation
from core.exceptions import (
    ForbiddenError,
    InsufficientStockError,
    InvalidInputError,
    InvalidStatusError,
    NotFoundError,
)
from models.order import OrderModel
from models.product import ProductModel
from schemas.order import Order, OrderPage
from schemas.user import Principal
from utils.converters import model_to_order
from utils.identifiers import ensure_valid_id, new_id
from utils.product_manager import ProductManager

logger = logging.getLogger(__name__)


def clamp_page(page, limit):
    """Clamp pagination to page >= 1 and 1 <= limit <= ORDERS_MAX_LIMIT.

    The page is also capped so the row offset stays a storable integer.
    """
    page = max(1, int(1 if page is None else page))
    page = min(page, MAX_DB_INTEGER // ORDERS_MAX_LIMIT)
    limit = int(ORDERS_DEFAULT_LIMIT if limit is None else limit)
    limit = max(1, min(ORDERS_MAX_LIMIT, limit))
    return page, limit


class OrderManager:
    """Manages orders and the stock they consume."""

    def __init__(self, db: Session):
        """Initialize OrderManager.

        Args:
            db: SQLAlchemy Session, shared with the product catalog so the
                stock decrement and the order insert are one transaction.
        """
        self.db = db
        self.products = ProductManager(db)

    @store_operation
    def place_order(
        self,
        user_id: str,
        product_id: str,
        quantity: int,
        delivery_address: str = "",
    ) -> Order:
        """Place an order for one product.

        Args:
            user_id: Owner of the new order.
            product_id: Product being bought.
            quantity: Positive number of units.
            delivery_address: Free-form address, may be empty.

        Returns:
            The created Order with its snapshotted total price.

        Raises:
            InvalidIdError: If product_id is malformed.
            InvalidInputError: If quantity is not a positive integer or the
                address is not a string.
            NotFoundError: If the product does not exist.
            InsufficientStockError: If the product has fewer units than
                requested, including when a concurrent order took them first.
        """
        ensure_valid_id(product_id, "product id")
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise InvalidInputError("Invalid quantity")
        if quantity <= 0 or quantity > MAX_DB_INTEGER:
            raise InvalidInputError("Invalid quantity")
        if not isinstance(delivery_address, str):
            raise InvalidInputError("Invalid delivery address")

        product = self.products.get_product(product_id)
        if product.quantity < quantity:
            raise InsufficientStockError()

        # Snapshot the price read above; later price edits don't touch the order
        total_price = product.price * quantity

        if not self.products.decrement_stock(product_id, quantity):
            self.db.rollback()
            remaining = (
                self.db.query(ProductModel.quantity)
                .filter(ProductModel.product_id == product_id)
                .scalar()
            )
            if remaining is None:
                raise NotFoundError("Product not found")
            logger.warning(
                "Stock decrement rejected for product %s: requested %d, remaining %d",
                product_id,
                quantity,
                remaining,
            )
            raise InsufficientStockError()

        now = datetime.now(pytz.utc).isoformat()
        model = OrderModel(
            order_id=new_id(),
            user_id=user_id,
            product_id=product_id,
            quantity=quantity,
            total_price=total_price,
            status="pending",
            delivery_address=delivery_address,
            created_at=now,
            updated_at=now,
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info(
            "Placed order %s: user %s bought %d x %s for %.2f",
            model.order_id,
            user_id,
            quantity,
            product_id,
            total_price,
        )
        return model_to_order(model)

    def _get_model(self, order_id: str) -> OrderModel:
        """Helper to get ORM model."""
        model = self.db.query(OrderModel).filter(OrderModel.order_id == order_id).first()
        if not model:
            raise NotFoundError("Order not found")
        return model

    @store_operation
    def get_order(self, order_id: str) -> Order:
        ensure_valid_id(order_id, "order id")
        return model_to_order(self._get_model(order_id))

    @store_operation
    def list_orders(
        self,
        principal: Principal,
        page: int = 1,
        limit: int = ORDERS_DEFAULT_LIMIT,
    ) -> OrderPage:
        """List orders newest first.

        Admins see every order, everyone else only their own.

        Args:
            principal: The caller.
            page: 1-based page number, clamped to >= 1.
            limit: Page size, clamped to 1..ORDERS_MAX_LIMIT.

        Returns:
            OrderPage with the total count across all pages.
        """
        principal = require_authenticated(principal)
        authorize(principal, Action.READ_ORDERS, principal.user_id)
        page, limit = clamp_page(page, limit)

        query = self.db.query(OrderModel)
        if not principal.is_admin:
            query = query.filter(OrderModel.user_id == principal.user_id)

        total = query.count()
        models = (
            query.order_by(OrderModel.created_at.desc(), OrderModel.order_id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return OrderPage(
            page=page,
            limit=limit,
            total=total,
            items=[model_to_order(m) for m in models],
        )

    @store_operation
    def update_status(self, order_id: str, status: str) -> Order:
        """Move an order to any allowed status.

        There is no enforced ordering between statuses.

        Raises:
            InvalidIdError: If order_id is malformed.
            InvalidStatusError: If status is not an allowed value.
            NotFoundError: If the order does not exist.
        """
        ensure_valid_id(order_id, "order id")
        if status not in ORDER_STATUSES:
            raise InvalidStatusError(
                f"Invalid status. Allowed: {', '.join(ORDER_STATUSES)}"
            )

        model = self._get_model(order_id)
        previous = model.status
        model.status = status
        model.updated_at = datetime.now(pytz.utc).isoformat()
        self.db.commit()
        self.db.refresh(model)
        logger.info("Order %s status %s -> %s", order_id, previous, status)
        return model_to_order(model)

    @store_operation
    def delete_order(self, principal: Principal, order_id: str) -> None:
        """Delete an order as its owner or as an admin.

        Deletion is allowed in any status and never restores stock. A
        non-admin gets ForbiddenError both for someone else's order and for a
        missing one, so the existence of other users' orders is not revealed.

        Raises:
            UnauthorizedError: If the caller is anonymous.
            InvalidIdError: If order_id is malformed.
            ForbiddenError: If a non-admin does not own the order.
            NotFoundError: If an admin targets a missing order.
        """
        principal = require_authenticated(principal)
        ensure_valid_id(order_id, "order id")

        model = self.db.query(OrderModel).filter(OrderModel.order_id == order_id).first()
        if principal.is_admin:
            if not model:
                raise NotFoundError("Order not found")
        else:
            if not model:
                raise ForbiddenError("Forbidden. You can only access your own resources.")
            authorize(principal, Action.DELETE_ORDER, model.user_id)

        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted order %s (by %s)", order_id, principal.user_id)
