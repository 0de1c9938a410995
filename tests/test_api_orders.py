import uuid

from conftest import login
from models.order import OrderModel


def _place(client, headers, product_id, quantity=1, address=""):
    return client.post(
        "/api/orders",
        json={"product_id": product_id, "quantity": quantity, "delivery_address": address},
        headers=headers,
    )


def test_place_order(client, user_headers, make_product):
    product = make_product(name="Widget", price=10.0, quantity=1)

    response = _place(client, user_headers, product.id, address="Main St 1")

    assert response.status_code == 201
    order = response.json()
    assert order["status"] == "pending"
    assert order["total_price"] == 10.0
    assert order["delivery_address"] == "Main St 1"
    assert client.get(f"/api/products/{product.id}").json()["quantity"] == 0

    again = _place(client, user_headers, product.id)
    assert again.status_code == 409
    assert again.json()["error"] == "InsufficientStock"


def test_place_order_validation(client, user_headers, make_product):
    product = make_product(quantity=5)

    zero = _place(client, user_headers, product.id, quantity=0)
    assert zero.status_code == 400
    assert zero.json()["error"] == "InvalidInput"

    bad_id = _place(client, user_headers, "123")
    assert bad_id.json()["error"] == "InvalidId"

    missing = _place(client, user_headers, str(uuid.uuid4()))
    assert missing.status_code == 404

    assert client.get(f"/api/products/{product.id}").json()["quantity"] == 5


def test_place_order_requires_session(client, make_product):
    product = make_product()
    response = _place(client, {}, product.id)
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"


def test_list_orders(client, make_user, make_product, admin_headers):
    make_user("alice@example.com")
    make_user("bob@example.com")
    alice = login(client, "alice@example.com")
    bob = login(client, "bob@example.com")
    product = make_product(quantity=10)
    _place(client, alice, product.id)
    _place(client, alice, product.id)
    _place(client, bob, product.id)

    alice_page = client.get("/api/orders", headers=alice).json()
    assert alice_page["total"] == 2
    assert alice_page["page"] == 1
    assert alice_page["limit"] == 10

    admin_page = client.get("/api/orders", params={"limit": 2}, headers=admin_headers).json()
    assert admin_page["total"] == 3
    assert len(admin_page["items"]) == 2

    assert client.get("/api/orders").status_code == 401


def test_status_change_is_admin_only(client, user_headers, admin_headers, make_product):
    product = make_product(quantity=2)
    order = _place(client, user_headers, product.id).json()

    denied = client.patch(
        f"/api/orders/{order['id']}/status", json={"status": "shipped"}, headers=user_headers
    )
    assert denied.status_code == 403
    assert denied.json()["error"] == "Forbidden"
    assert client.get("/api/orders", headers=user_headers).json()["items"][0]["status"] == "pending"

    delivered = client.patch(
        f"/api/orders/{order['id']}/status", json={"status": "delivered"}, headers=admin_headers
    )
    assert delivered.status_code == 200
    assert delivered.json()["status"] == "delivered"
    assert delivered.json()["updated_at"] >= order["updated_at"]

    listed = client.get("/api/orders", headers=user_headers).json()["items"][0]
    assert listed["status"] == "delivered"

    invalid = client.patch(
        f"/api/orders/{order['id']}/status", json={"status": "lost"}, headers=admin_headers
    )
    assert invalid.status_code == 400
    assert invalid.json()["error"] == "InvalidStatus"


def test_delete_order(client, make_user, make_product, admin_headers):
    make_user("alice@example.com")
    make_user("bob@example.com")
    alice = login(client, "alice@example.com")
    bob = login(client, "bob@example.com")
    product = make_product(quantity=3)
    order = _place(client, alice, product.id).json()

    assert client.delete(f"/api/orders/{order['id']}", headers=bob).status_code == 403
    assert client.delete(f"/api/orders/{order['id']}").status_code == 401
    assert client.delete(f"/api/orders/{order['id']}", headers=alice).status_code == 200
    assert client.delete(f"/api/orders/{order['id']}", headers=admin_headers).status_code == 404
    # Stock is not restored by deletion
    assert client.get(f"/api/products/{product.id}").json()["quantity"] == 2


def test_place_order_quantity_must_be_an_integer(client, user_headers, make_product):
    product = make_product(quantity=5)

    for quantity in [True, "2", 1.5, 2**63]:
        response = _place(client, user_headers, product.id, quantity=quantity)
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidInput"

    assert client.get(f"/api/products/{product.id}").json()["quantity"] == 5
    assert client.get("/api/orders", headers=user_headers).json()["total"] == 0


def test_huge_page_is_clamped(client, user_headers):
    response = client.get("/api/orders", params={"page": 10**19}, headers=user_headers)

    assert response.status_code == 200
    assert response.json()["items"] == []
    assert response.json()["page"] < 10**19


def test_store_failure_is_reported_and_keeps_stock(client, database, user_headers, make_product):
    product = make_product(quantity=3)
    OrderModel.__table__.drop(database.engine)

    response = _place(client, user_headers, product.id, quantity=2)

    assert response.status_code == 503
    assert response.json()["error"] == "StoreUnavailable"
    assert client.get(f"/api/products/{product.id}").json()["quantity"] == 3
