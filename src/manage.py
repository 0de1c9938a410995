"""Out-of-band administration commands.

Roles are never changed through the HTTP API. This command-line tool works
directly against the configured database to create admin accounts, change a
user's role and seed a demo catalog.

Usage:
    python manage.py create-admin --name "Ada" --email ada@example.com --password ...
    python manage.py set-role --email bob@example.com --role admin
    python manage.py seed-products
"""

import argparse
import logging
import sys
from typing import List, Optional

from config import DATABASE_URL
from core.database import Database
from core.exceptions import EmailTakenError, InventoryError
from models.product import ProductModel
from schemas.product import ProductPayload
from utils.product_manager import ProductManager
from utils.user_manager import UserManager

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

DEMO_PRODUCTS = [
    {"name": "Toyota Land Cruiser", "price": 10500000, "quantity": 4},
    {"name": "Hyundai Accent", "price": 9200000, "quantity": 9},
    {"name": "Kia K5", "price": 15800000, "quantity": 5},
]


def create_admin(database: Database, name: str, email: str, password: str) -> bool:
    """Create an admin account unless the email already exists.

    Returns:
        True if a new admin was created.
    """
    db = database.session()
    try:
        UserManager(db).create_user(name=name, email=email, password=password, role="admin")
    except EmailTakenError:
        print(f"Admin exists: {email}")
        return False
    finally:
        db.close()
    print(f"Inserted admin: {email.lower()}")
    return True


def set_role(database: Database, email: str, role: str) -> None:
    db = database.session()
    try:
        user = UserManager(db).set_role(email, role)
    finally:
        db.close()
    print(f"{user.email} is now {user.role}")


def seed_products(database: Database) -> int:
    """Insert the demo catalog when the products table is empty.

    Returns:
        Number of products inserted.
    """
    db = database.session()
    try:
        existing = db.query(ProductModel).count()
        if existing > 0:
            print(f"Products already exist ({existing}), skipping seed")
            return 0
        manager = ProductManager(db)
        for item in DEMO_PRODUCTS:
            product = manager.create_product(ProductPayload(**item))
            print(f"Inserted {product.name} (id {product.id})")
    finally:
        db.close()
    print("Seed completed.")
    return len(DEMO_PRODUCTS)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inventory API administration")
    parser.add_argument("--database-url", default=DATABASE_URL)
    sub = parser.add_subparsers(dest="command", required=True)

    admin = sub.add_parser("create-admin", help="Create an admin account")
    admin.add_argument("--name", required=True)
    admin.add_argument("--email", required=True)
    admin.add_argument("--password", required=True)

    role = sub.add_parser("set-role", help="Change the role of a user")
    role.add_argument("--email", required=True)
    role.add_argument("--role", required=True, choices=["user", "admin"])

    sub.add_parser("seed-products", help="Insert demo products into an empty catalog")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    database = Database(args.database_url)
    database.init_db()
    try:
        if args.command == "create-admin":
            create_admin(database, args.name, args.email, args.password)
        elif args.command == "set-role":
            set_role(database, args.email, args.role)
        elif args.command == "seed-products":
            seed_products(database)
    except InventoryError as e:
        logger.error("%s: %s", e.kind, e.message)
        return 1
    finally:
        database.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
