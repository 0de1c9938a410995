"""Identifier generation and validation."""

import uuid

from core.exceptions import InvalidIdError


def new_id() -> str:
    return str(uuid.uuid4())


def is_valid_id(value) -> bool:
    """Return True if ``value`` is a UUID in canonical string form."""
    if not isinstance(value, str):
        return False
    try:
        return str(uuid.UUID(value)) == value
    except ValueError:
        return False


def ensure_valid_id(value, label: str = "id") -> str:
    """Validate an identifier before it reaches the store.

    Raises:
        InvalidIdError: If the value is not a canonical UUID string.
    """
    if not is_valid_id(value):
        raise InvalidIdError(f"Invalid {label}")
    return value
