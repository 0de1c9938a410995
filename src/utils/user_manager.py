"""User management utilities.

This module provides user management functionality including user storage,
password hashing, registration validation and credential checks.
"""

import logging
from typing import Optional

import bcrypt
from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from config import BCRYPT_ROUNDS, PASSWORD_MIN_LENGTH, USER_ROLES
from core.database import store_operation
from core.exceptions import (
    EmailTakenError,
    InvalidCredentialsError,
    InvalidInputError,
    NotFoundError,
)
from schemas.user import User
from models.auth_session import AuthSessionModel
from models.user import UserModel
from utils.converters import user_to_model, model_to_user

logger = logging.getLogger(__name__)

_EMAIL_ADAPTER = TypeAdapter(EmailStr)


def validate_email(email) -> bool:
    """Return True if ``email`` is a syntactically valid address."""
    try:
        _EMAIL_ADAPTER.validate_python(email)
    except ValidationError:
        return False
    return True


class UserManager:
    """Manages user data persistence and operations using SQLAlchemy."""

    def __init__(self, db: Session, bcrypt_rounds: int = BCRYPT_ROUNDS):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
            bcrypt_rounds: Cost factor for new password hashes.
        """
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password.

        Returns:
            Hashed password (bcrypt hash string).
        """
        # Truncate password if it exceeds bcrypt's 72-byte limit
        password_bytes = password.encode('utf-8')
        if len(password_bytes) > 72:
            logger.warning(
                "Password exceeds 72 bytes (%d bytes), truncating", len(password_bytes)
            )
            password_bytes = password_bytes[:72]

        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        hashed = bcrypt.hashpw(password_bytes, salt)
        return hashed.decode('utf-8')

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            plain_password: Plain text password to verify.
            hashed_password: Bcrypt hash string to verify against.

        Returns:
            True if password matches, False otherwise.
        """
        password_bytes = plain_password.encode('utf-8')[:72]
        try:
            return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))
        except ValueError as e:
            # Malformed stored hash
            logger.error("Password verification error: %s", e)
            return False

    @store_operation
    def create_user(
        self,
        name: str,
        email: str,
        password: str,
        role: str = "user",
    ) -> User:
        """Create a new user.

        Args:
            name: Display name.
            email: Email address, stored lowercased.
            password: Plain text password.
            role: User role ('user' or 'admin').

        Returns:
            Created User object.

        Raises:
            InvalidInputError: If name, email or password fail validation.
            EmailTakenError: If the lowercased email already exists.
        """
        if not isinstance(name, str) or not name.strip():
            raise InvalidInputError("Invalid registration data: name is required")
        if not validate_email(email):
            raise InvalidInputError("Invalid registration data: email is malformed")
        if not isinstance(password, str) or len(password) < PASSWORD_MIN_LENGTH:
            raise InvalidInputError(
                f"Invalid registration data: password must be at least "
                f"{PASSWORD_MIN_LENGTH} characters"
            )
        if role not in USER_ROLES:
            raise InvalidInputError(f"Invalid role: {role}")

        email = email.lower()
        existing = self.db.query(UserModel).filter(UserModel.email == email).first()
        if existing:
            raise EmailTakenError()

        user = User(
            name=name.strip(),
            email=email,
            password_hash=self.hash_password(password),
            role=role,
        )

        # Handle potential race condition: if two requests check simultaneously,
        # both might pass the check but database unique constraint will catch it
        try:
            self.db.add(user_to_model(user))
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise EmailTakenError() from e

        logger.info("Created user: %s (%s)", user.email, user.role)
        return user

    @store_operation
    def authenticate(self, email: str, password: str) -> User:
        """Check credentials and return the matching user.

        Raises:
            InvalidCredentialsError: If the email is unknown or the password
                does not match. Both cases are reported identically.
        """
        if not validate_email(email) or not isinstance(password, str) or not password:
            raise InvalidCredentialsError()

        user = self.get_user_by_email(email)
        if user is None or not self.verify_password(password, user.password_hash):
            raise InvalidCredentialsError()
        return user

    @store_operation
    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email (case-insensitive).

        Args:
            email: Email to look up.

        Returns:
            User object if found, None otherwise.
        """
        model = self.db.query(UserModel).filter(UserModel.email == email.lower()).first()
        if model:
            return model_to_user(model)
        return None

    @store_operation
    def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by user ID.

        Args:
            user_id: User ID to look up.

        Returns:
            User object if found, None otherwise.
        """
        model = self.db.query(UserModel).filter(UserModel.user_id == user_id).first()
        if model:
            return model_to_user(model)
        return None

    @store_operation
    def set_role(self, email: str, role: str) -> User:
        """Change a user's role. Only used by out-of-band administration.

        Raises:
            InvalidInputError: If the role is unknown.
            NotFoundError: If no user has this email.
        """
        if role not in USER_ROLES:
            raise InvalidInputError(f"Invalid role: {role}")
        model = self.db.query(UserModel).filter(UserModel.email == email.lower()).first()
        if not model:
            raise NotFoundError("User not found")
        model.role = role
        # Open sessions carry the old role; force a fresh login
        revoked = (
            self.db.query(AuthSessionModel)
            .filter(AuthSessionModel.user_id == model.user_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        self.db.refresh(model)
        logger.info("Set role of %s to %s, revoked %d sessions", model.email, role, revoked)
        return model_to_user(model)
