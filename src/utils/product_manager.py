"""Product catalog utilities.

This module provides catalog queries (filtering, sorting, field projection),
admin CRUD, and the atomic conditional stock decrement used by order placement.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Union

import pytz
from sqlalchemy import update
from sqlalchemy.orm import Session

from core.database import store_operation
from core.exceptions import InvalidInputError, NotFoundError
from models.product import ProductModel
from schemas.product import PROJECTABLE_FIELDS, SORTABLE_FIELDS, Product, ProductPayload
from utils.converters import model_to_product
from utils.identifiers import ensure_valid_id, new_id

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    "name": ProductModel.name,
    "price": ProductModel.price,
    "quantity": ProductModel.quantity,
    "created_at": ProductModel.created_at,
    "updated_at": ProductModel.updated_at,
}


def parse_fields(fields: Union[str, Sequence[str], None]) -> Optional[List[str]]:
    """Validate a projection against the allow-list.

    Args:
        fields: Comma-separated string or list of field names. Empty means
            no projection.

    Returns:
        Ordered field names including ``id``, or None for the full record.

    Raises:
        InvalidInputError: If a field is not projectable.
    """
    if fields is None:
        return None
    if isinstance(fields, str):
        fields = fields.split(",")
    names = [f.strip() for f in fields if f and f.strip()]
    if not names:
        return None

    unknown = [f for f in names if f not in PROJECTABLE_FIELDS]
    if unknown:
        raise InvalidInputError(f"Unknown field(s): {', '.join(unknown)}")
    # id is always returned
    return [f for f in PROJECTABLE_FIELDS if f == "id" or f in names]


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ProductManager:
    """Manages the product catalog using SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    @store_operation
    def list_products(
        self,
        name: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        sort_by: str = "name",
        order: str = "asc",
        fields: Union[str, Sequence[str], None] = None,
    ) -> List[Dict[str, Any]]:
        """List products with optional filters, sorting and projection.

        Args:
            name: Case-insensitive substring of the product name.
            min_price: Inclusive lower price bound.
            max_price: Inclusive upper price bound.
            sort_by: One of the sortable fields.
            order: 'asc' or 'desc'.
            fields: Projection, see ``parse_fields``.

        Returns:
            List of product dicts, restricted to the projected fields.

        Raises:
            InvalidInputError: If sort_by, order or fields are not allowed.
        """
        if sort_by not in SORTABLE_FIELDS:
            raise InvalidInputError(f"Cannot sort by '{sort_by}'")
        if order not in ("asc", "desc"):
            raise InvalidInputError("order must be 'asc' or 'desc'")
        projection = parse_fields(fields)

        query = self.db.query(ProductModel)
        if name:
            query = query.filter(
                ProductModel.name.ilike(f"%{_escape_like(name)}%", escape="\\")
            )
        if min_price is not None:
            query = query.filter(ProductModel.price >= min_price)
        if max_price is not None:
            query = query.filter(ProductModel.price <= max_price)

        column = _SORT_COLUMNS[sort_by]
        query = query.order_by(
            column.desc() if order == "desc" else column.asc(),
            ProductModel.product_id.asc(),
        )

        products = [model_to_product(m) for m in query.all()]
        if projection is None:
            return [p.model_dump() for p in products]
        return [p.model_dump(include=set(projection)) for p in products]

    def _get_model(self, product_id: str) -> ProductModel:
        """Helper to get ORM model."""
        ensure_valid_id(product_id, "product id")
        model = (
            self.db.query(ProductModel)
            .filter(ProductModel.product_id == product_id)
            .first()
        )
        if not model:
            raise NotFoundError("Product not found")
        return model

    @store_operation
    def get_product(self, product_id: str) -> Product:
        """Read one product.

        Raises:
            InvalidIdError: If the id is malformed.
            NotFoundError: If the product does not exist.
        """
        return model_to_product(self._get_model(product_id))

    @store_operation
    def create_product(self, payload: ProductPayload) -> Product:
        now = datetime.now(pytz.utc).isoformat()
        model = ProductModel(
            product_id=new_id(),
            name=payload.name,
            price=payload.price,
            quantity=payload.quantity,
            created_at=now,
            updated_at=now,
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Created product %s (%s)", model.product_id, model.name)
        return model_to_product(model)

    @store_operation
    def update_product(self, product_id: str, payload: ProductPayload) -> Product:
        """Replace name, price and quantity of a product."""
        model = self._get_model(product_id)
        model.name = payload.name
        model.price = payload.price
        model.quantity = payload.quantity
        model.updated_at = datetime.now(pytz.utc).isoformat()
        self.db.commit()
        self.db.refresh(model)
        logger.info("Updated product %s", product_id)
        return model_to_product(model)

    @store_operation
    def delete_product(self, product_id: str) -> None:
        model = self._get_model(product_id)
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted product %s", product_id)

    def decrement_stock(self, product_id: str, quantity: int) -> bool:
        """Atomically take ``quantity`` units out of stock.

        A single conditional UPDATE: the row changes only while it still holds
        at least ``quantity`` units. Does not commit; the caller owns the
        transaction.

        Returns:
            True if the stock was decremented, False if no row qualified.
        """
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.product_id == product_id)
            .where(ProductModel.quantity >= quantity)
            .values(
                quantity=ProductModel.quantity - quantity,
                updated_at=datetime.now(pytz.utc).isoformat(),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
