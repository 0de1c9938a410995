"""User schema definitions.

This module defines the User data model and the request/response payloads of
the authentication routes.
"""

import uuid
from datetime import datetime
from typing import Optional

import pytz
from pydantic import BaseModel, EmailStr, Field


class User(BaseModel):
    id: str = Field(
        description="The unique identifier for the user.",
        default_factory=lambda: str(uuid.uuid4()),
        frozen=True,
    )
    name: str = Field(description="Display name of the user.")
    email: str = Field(description="Lowercased email address, unique per user.")
    password_hash: str = Field(description="Bcrypt hash of the password.")
    role: str = Field(description="'user' or 'admin'.", default="user")
    created_at: str = Field(
        description="The time when the user registered.",
        default_factory=lambda: datetime.now(pytz.utc).isoformat(),
    )

    def public(self) -> "PublicUser":
        """Return the profile without the password hash."""
        return PublicUser(**self.model_dump(exclude={"password_hash"}))


class PublicUser(BaseModel):
    """User profile safe to return to clients."""
    id: str
    name: str
    email: str
    role: str
    created_at: str


class Principal(BaseModel):
    """The authenticated identity behind a request."""
    user_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class AuthResponse(BaseModel):
    user: PublicUser
    token: str = Field(description="Signed session token, also set as a cookie.")


class CurrentUserResponse(BaseModel):
    user: Optional[PublicUser] = None
