"""Session management module.

This module implements the server-side session registry. A session binds an
opaque random token to a user id and role until it expires. Clients never see
the raw token: it travels inside a short signed JWT so that a tampered cookie
is rejected before the registry is consulted.
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

import pytz
from jose import JWTError, jwt
from sqlalchemy.orm import Session as DBSession

from config import SESSION_ALGORITHM, SESSION_MAX_AGE_SECONDS, SESSION_SECRET
from core.database import store_operation
from models.auth_session import AuthSessionModel
from models.user import UserModel
from schemas.user import Principal, User

logger = logging.getLogger(__name__)


def sign_session_token(token: str, expires_at: datetime, secret: str = SESSION_SECRET) -> str:
    """Wrap a registry token into a signed JWT.

    Args:
        token: Opaque registry token.
        expires_at: Expiry of the session.
        secret: Signing key.

    Returns:
        Encoded JWT string.
    """
    return jwt.encode({"sid": token, "exp": expires_at}, secret, algorithm=SESSION_ALGORITHM)


def read_session_token(signed: Optional[str], secret: str = SESSION_SECRET) -> Optional[str]:
    """Return the registry token inside a signed JWT, or None if invalid."""
    if not signed:
        return None
    try:
        payload = jwt.decode(signed, secret, algorithms=[SESSION_ALGORITHM])
    except JWTError:
        return None
    sid = payload.get("sid")
    return sid if isinstance(sid, str) else None


class SessionManager:
    """Manages login sessions using SQLAlchemy."""

    def __init__(self, db: DBSession, max_age_seconds: int = SESSION_MAX_AGE_SECONDS):
        """Initialize SessionManager.

        Args:
            db: SQLAlchemy Session.
            max_age_seconds: Lifetime of newly created sessions.
        """
        self.db = db
        self.max_age_seconds = max_age_seconds

    @store_operation
    def create_session(self, user: User) -> str:
        """Open a session for a user.

        Args:
            user: The authenticated user.

        Returns:
            Signed session token to hand to the client.
        """
        now = datetime.now(pytz.utc)
        expires_at = now + timedelta(seconds=self.max_age_seconds)
        token = secrets.token_urlsafe(32)
        model = AuthSessionModel(
            token=token,
            user_id=user.id,
            role=user.role,
            created_at=now.isoformat(),
            expires_at=expires_at.isoformat(),
        )
        self.db.add(model)
        self.db.commit()
        logger.info("Created session for user %s", user.id)
        return sign_session_token(token, expires_at)

    @store_operation
    def get_principal(self, signed: Optional[str]) -> Optional[Principal]:
        """Resolve a signed session token to the principal it belongs to.

        Expired sessions and sessions whose user no longer exists are
        destroyed on the way.

        Args:
            signed: Signed token from the cookie or Authorization header.

        Returns:
            Principal, or None when the request is anonymous.
        """
        token = read_session_token(signed)
        if token is None:
            return None

        model = self.db.query(AuthSessionModel).filter(AuthSessionModel.token == token).first()
        if not model:
            return None

        expires_at = datetime.fromisoformat(model.expires_at.replace("Z", "+00:00"))
        if datetime.now(pytz.utc) > expires_at:
            self._drop(model, "expired")
            return None

        user_exists = (
            self.db.query(UserModel.user_id).filter(UserModel.user_id == model.user_id).first()
        )
        if not user_exists:
            self._drop(model, "user no longer exists")
            return None

        return Principal(user_id=model.user_id, role=model.role)

    @store_operation
    def destroy_session(self, signed: Optional[str]) -> None:
        """Destroy the session behind a signed token.

        Unknown or invalid tokens are ignored, so logout is idempotent.
        """
        token = read_session_token(signed)
        if token is None:
            return
        model = self.db.query(AuthSessionModel).filter(AuthSessionModel.token == token).first()
        if model:
            self._drop(model, "logout")

    @store_operation
    def purge_expired(self) -> int:
        """Delete every expired session.

        Returns:
            Number of sessions removed.
        """
        # All timestamps are written as UTC isoformat, so they compare as strings
        now = datetime.now(pytz.utc).isoformat()
        removed = (
            self.db.query(AuthSessionModel)
            .filter(AuthSessionModel.expires_at < now)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        if removed:
            logger.info("Purged %d expired sessions", removed)
        return removed

    def _drop(self, model: AuthSessionModel, reason: str) -> None:
        self.db.delete(model)
        self.db.commit()
        logger.info("Destroyed session for user %s (%s)", model.user_id, reason)
