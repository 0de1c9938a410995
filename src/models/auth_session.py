from sqlalchemy import Column, String
from .base import Base


class AuthSessionModel(Base):
    """Server-side session registry entry."""

    __tablename__ = "auth_sessions"

    token = Column(String, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    role = Column(String, nullable=False)
    created_at = Column(String, nullable=False)
    expires_at = Column(String, nullable=False)  # ISO format string
