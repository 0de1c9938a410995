import uuid

import pytest
from pydantic import ValidationError

from core.exceptions import InvalidIdError, InvalidInputError, NotFoundError
from schemas.product import ProductPayload
from utils.product_manager import ProductManager, parse_fields


@pytest.fixture
def catalog(make_product):
    make_product(name="Blue Widget", price=10.0, quantity=5)
    make_product(name="Red Widget", price=25.5, quantity=0)
    make_product(name="Gadget", price=99.99, quantity=12)
    make_product(name="100%_cotton tee", price=5.0, quantity=3)


def test_create_then_read_round_trip(db):
    manager = ProductManager(db)
    created = manager.create_product(ProductPayload(name="  Widget ", price=12.34, quantity=7))

    fetched = manager.get_product(created.id)

    assert fetched == created
    assert fetched.name == "Widget"
    assert fetched.price == 12.34
    assert fetched.quantity == 7
    assert fetched.created_at == fetched.updated_at


def test_list_sorted_by_name_by_default(db, catalog):
    names = [p["name"] for p in ProductManager(db).list_products()]
    assert names == ["100%_cotton tee", "Blue Widget", "Gadget", "Red Widget"]


def test_list_filters(db, catalog):
    manager = ProductManager(db)
    assert [p["name"] for p in manager.list_products(name="widget")] == [
        "Blue Widget",
        "Red Widget",
    ]
    assert [p["name"] for p in manager.list_products(min_price=10, max_price=25.5)] == [
        "Blue Widget",
        "Red Widget",
    ]
    # LIKE wildcards in the filter are matched literally
    assert [p["name"] for p in manager.list_products(name="%_")] == ["100%_cotton tee"]


def test_list_sort_desc(db, catalog):
    prices = [p["price"] for p in ProductManager(db).list_products(sort_by="price", order="desc")]
    assert prices == sorted(prices, reverse=True)


def test_projection_keeps_id(db, catalog):
    products = ProductManager(db).list_products(fields="name, price")
    assert all(set(p) == {"id", "name", "price"} for p in products)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"fields": "name,password_hash"},
        {"sort_by": "secret"},
        {"order": "sideways"},
    ],
)
def test_list_rejects_unknown_names(db, kwargs):
    with pytest.raises(InvalidInputError):
        ProductManager(db).list_products(**kwargs)


def test_parse_fields():
    assert parse_fields(None) is None
    assert parse_fields(" , ") is None
    assert parse_fields(["quantity", "name"]) == ["id", "name", "quantity"]


def test_get_product_errors(db):
    manager = ProductManager(db)
    with pytest.raises(InvalidIdError):
        manager.get_product("abc")
    with pytest.raises(InvalidIdError):
        manager.get_product(str(uuid.uuid4()).upper())
    with pytest.raises(NotFoundError):
        manager.get_product(str(uuid.uuid4()))


def test_update_and_delete(db, make_product):
    manager = ProductManager(db)
    product = make_product(quantity=1)

    updated = manager.update_product(product.id, ProductPayload(name="New", price=3, quantity=9))
    assert (updated.name, updated.price, updated.quantity) == ("New", 3.0, 9)
    assert updated.updated_at >= product.updated_at
    assert updated.created_at == product.created_at

    manager.delete_product(product.id)
    with pytest.raises(NotFoundError):
        manager.get_product(product.id)
    with pytest.raises(NotFoundError):
        manager.delete_product(product.id)


def test_decrement_stock_is_conditional(db, make_product):
    manager = ProductManager(db)
    product = make_product(quantity=2)

    assert manager.decrement_stock(product.id, 3) is False
    assert manager.decrement_stock(product.id, 2) is True
    db.commit()
    db.expire_all()
    assert manager.get_product(product.id).quantity == 0


@pytest.mark.parametrize(
    "payload",
    [
        {"name": " ", "price": 1, "quantity": 1},
        {"name": "x", "price": -1, "quantity": 1},
        {"name": "x", "price": float("inf"), "quantity": 1},
        {"name": "x", "price": 1, "quantity": -1},
        {"name": "x", "price": 1, "quantity": 1.5},
        {"price": 1, "quantity": 1},
    ],
)
def test_payload_validation(payload):
    with pytest.raises(ValidationError):
        ProductPayload(**payload)
