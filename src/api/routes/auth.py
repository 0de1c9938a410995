"""Authentication routes.

This module handles HTTP endpoints for user registration, login, logout and
the current-user lookup. Sessions live server-side; the client holds a signed
token in an HttpOnly cookie (or sends it as a Bearer token).
"""

import logging

from fastapi import APIRouter, Response, status

from config import COOKIE_SECURE, SESSION_COOKIE_NAME, SESSION_MAX_AGE_SECONDS
from core.dependencies import (
    PrincipalDep,
    SessionManagerDep,
    SessionTokenDep,
    UserManagerDep,
)
from schemas.user import (
    AuthResponse,
    CurrentUserResponse,
    LoginRequest,
    RegisterRequest,
    User,
)
from utils.session_manager import SessionManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _open_session(response: Response, sessions: SessionManager, user: User) -> AuthResponse:
    """Create a session for ``user`` and attach its cookie to the response."""
    token = sessions.create_session(user)
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=SESSION_MAX_AGE_SECONDS,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="lax",
    )
    return AuthResponse(user=user.public(), token=token)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
def register(
    req: RegisterRequest,
    response: Response,
    user_manager: UserManagerDep,
    sessions: SessionManagerDep,
) -> AuthResponse:
    """Register a new user with role 'user' and log them in.

    Args:
        req: Registration request with name, email and password.
        response: Outgoing response, receives the session cookie.
        user_manager: Injected UserManager instance.
        sessions: Injected SessionManager instance.

    Returns:
        AuthResponse with the public profile and session token.

    Raises:
        InvalidInputError: If name, email or password fail validation.
        EmailTakenError: If the email is already registered.
    """
    user = user_manager.create_user(name=req.name, email=req.email, password=req.password)
    return _open_session(response, sessions, user)


@router.post("/login", response_model=AuthResponse, summary="Log in")
def login(
    req: LoginRequest,
    response: Response,
    user_manager: UserManagerDep,
    sessions: SessionManagerDep,
) -> AuthResponse:
    """Login with email and password.

    Raises:
        InvalidCredentialsError: If the email is unknown or the password is
            wrong. Both cases look the same to the caller.
    """
    user = user_manager.authenticate(req.email, req.password)
    logger.info("User %s logged in", user.id)
    return _open_session(response, sessions, user)


@router.post("/logout", summary="Log out")
def logout(
    response: Response,
    token: SessionTokenDep,
    sessions: SessionManagerDep,
) -> dict:
    """Destroy the current session. Always succeeds."""
    sessions.destroy_session(token)
    response.delete_cookie(
        SESSION_COOKIE_NAME, httponly=True, secure=COOKIE_SECURE, samesite="lax"
    )
    return {"message": "Logged out"}


@router.get("/me", response_model=CurrentUserResponse, summary="Current user")
def me(
    principal: PrincipalDep,
    user_manager: UserManagerDep,
) -> CurrentUserResponse:
    """Return the caller's public profile, or ``{"user": null}`` if anonymous."""
    if principal is None:
        return CurrentUserResponse(user=None)
    user = user_manager.get_user_by_id(principal.user_id)
    if user is None:
        return CurrentUserResponse(user=None)
    return CurrentUserResponse(user=user.public())
