"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes,
following Google Python Style Guide and FastAPI best practices.
"""

from typing import Annotated, Iterator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from config import SESSION_COOKIE_NAME
from core.authorization import require_admin, require_authenticated
from schemas.user import Principal
from utils import order_manager
from utils import product_manager
from utils import session_manager
from utils import user_manager

# Bearer token is optional: browsers send the session cookie instead
security = HTTPBearer(auto_error=False)


def get_db(request: Request) -> Iterator[Session]:
    """Dependency for getting a request-scoped database session.

    The Database handle is created at startup and stored on app.state.
    """
    yield from request.app.state.database.iter_session()


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_session_manager(db: Session = Depends(get_db)) -> session_manager.SessionManager:
    """Get SessionManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        SessionManager instance.
    """
    return session_manager.SessionManager(db)


def get_product_manager(db: Session = Depends(get_db)) -> product_manager.ProductManager:
    """Get ProductManager instance with request-scoped DB session."""
    return product_manager.ProductManager(db)


def get_order_manager(db: Session = Depends(get_db)) -> order_manager.OrderManager:
    """Get OrderManager instance with request-scoped DB session."""
    return order_manager.OrderManager(db)


def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Read the signed session token from the Authorization header or cookie."""
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(SESSION_COOKIE_NAME)


def get_principal(
    token: Optional[str] = Depends(get_session_token),
    sessions: session_manager.SessionManager = Depends(get_session_manager),
) -> Optional[Principal]:
    """Resolve the caller. None means anonymous."""
    return sessions.get_principal(token)


def get_authenticated_principal(
    principal: Optional[Principal] = Depends(get_principal),
) -> Principal:
    return require_authenticated(principal)


def get_admin_principal(
    principal: Optional[Principal] = Depends(get_principal),
) -> Principal:
    return require_admin(principal)


# Type aliases for dependency injection
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
SessionManagerDep = Annotated[
    session_manager.SessionManager, Depends(get_session_manager)
]
ProductManagerDep = Annotated[
    product_manager.ProductManager, Depends(get_product_manager)
]
OrderManagerDep = Annotated[
    order_manager.OrderManager, Depends(get_order_manager)
]
SessionTokenDep = Annotated[Optional[str], Depends(get_session_token)]
PrincipalDep = Annotated[Optional[Principal], Depends(get_principal)]
AuthenticatedDep = Annotated[Principal, Depends(get_authenticated_principal)]
AdminDep = Annotated[Principal, Depends(get_admin_principal)]
