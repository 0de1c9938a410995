import uuid

PRODUCT = {"name": "Widget", "price": 10.0, "quantity": 1}


def test_catalog_is_public(client, make_product):
    product = make_product()

    listing = client.get("/api/products")
    assert listing.status_code == 200
    assert [p["id"] for p in listing.json()] == [product.id]

    single = client.get(f"/api/products/{product.id}")
    assert single.status_code == 200
    assert single.json()["name"] == "Widget"


def test_admin_create_round_trip(client, admin_headers):
    created = client.post("/api/products", json=PRODUCT, headers=admin_headers)
    assert created.status_code == 201

    fetched = client.get(f"/api/products/{created.json()['id']}").json()
    assert fetched == created.json()
    assert fetched["price"] == 10.0
    assert fetched["quantity"] == 1


def test_create_requires_admin(client, user_headers):
    anonymous = client.post("/api/products", json=PRODUCT)
    assert anonymous.status_code == 401
    assert anonymous.json()["error"] == "Unauthorized"

    user = client.post("/api/products", json=PRODUCT, headers=user_headers)
    assert user.status_code == 403
    assert user.json()["error"] == "Forbidden"

    assert client.get("/api/products").json() == []


def test_invalid_payload(client, admin_headers):
    response = client.post(
        "/api/products", json={"name": "", "price": -1, "quantity": 1}, headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidInput"


def test_update_and_delete(client, admin_headers, make_product):
    product = make_product()

    updated = client.put(
        f"/api/products/{product.id}",
        json={"name": "Gizmo", "price": 12.5, "quantity": 4},
        headers=admin_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["name"] == "Gizmo"

    assert client.delete(f"/api/products/{product.id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/products/{product.id}").status_code == 404


def test_ids_are_validated(client, admin_headers):
    response = client.get("/api/products/not-an-id")
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidId"

    missing = client.delete(f"/api/products/{uuid.uuid4()}", headers=admin_headers)
    assert missing.status_code == 404
    assert missing.json()["error"] == "NotFound"


def test_query_projection_and_filters(client, make_product):
    make_product(name="Cheap", price=1.0, quantity=3)
    make_product(name="Pricey", price=50.0, quantity=3)

    response = client.get("/api/products", params={"min_price": 10, "fields": "name"})
    assert response.json() == [{"id": response.json()[0]["id"], "name": "Pricey"}]

    rejected = client.get("/api/products", params={"fields": "name,secret"})
    assert rejected.status_code == 400
    assert rejected.json()["error"] == "InvalidInput"

    bad_sort = client.get("/api/products", params={"sort_by": "nope"})
    assert bad_sort.status_code == 400


def test_quantity_must_be_a_storable_integer(client, admin_headers):
    for quantity in [True, "2", 1.5, -1, 2**63]:
        response = client.post(
            "/api/products", json={**PRODUCT, "quantity": quantity}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidInput"

    largest = client.post(
        "/api/products", json={**PRODUCT, "quantity": 2**63 - 1}, headers=admin_headers
    )
    assert largest.status_code == 201
    assert largest.json()["quantity"] == 2**63 - 1
    assert len(client.get("/api/products").json()) == 1
