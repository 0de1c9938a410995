import os

# Cheap hashes for tests; must be set before config is imported
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SESSION_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.database import Database
from schemas.product import ProductPayload
from utils.product_manager import ProductManager
from utils.user_manager import UserManager

PASSWORD = "secret123"


@pytest.fixture
def database(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'test.db'}")
    database.init_db()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def app(database):
    return create_app(database)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def make_user(db):
    def _make_user(email, role="user", name="Test User", password=PASSWORD):
        return UserManager(db).create_user(name=name, email=email, password=password, role=role)

    return _make_user


@pytest.fixture
def make_product(db):
    def _make_product(name="Widget", price=10.0, quantity=1):
        return ProductManager(db).create_product(
            ProductPayload(name=name, price=price, quantity=quantity)
        )

    return _make_product


def login(client, email, password=PASSWORD):
    """Log in and return Authorization headers for the session."""
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    # Keep the shared client anonymous unless headers are passed explicitly
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def admin_headers(client, make_user):
    make_user("admin@example.com", role="admin", name="Admin")
    return login(client, "admin@example.com")


@pytest.fixture
def user_headers(client, make_user):
    make_user("alice@example.com", name="Alice")
    return login(client, "alice@example.com")
