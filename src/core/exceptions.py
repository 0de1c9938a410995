"""Custom exception classes for the Inventory and Order Management API.

This module defines application-specific exceptions following Google Python
Style Guide. Every exception carries a stable ``kind`` that clients can match
on, the HTTP status it maps to, and a human-readable message.
"""


class InventoryError(Exception):
    """Base exception for all inventory and order errors."""

    kind = "InternalError"
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: str = None):
        """Initialize the exception.

        Args:
            message: Optional human-readable message. Falls back to the
                class default.
        """
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


class InvalidInputError(InventoryError):
    """Raised when request data is malformed or missing."""

    kind = "InvalidInput"
    status_code = 400
    default_message = "Invalid input"


class InvalidIdError(InventoryError):
    """Raised when an identifier does not match the store's id format."""

    kind = "InvalidId"
    status_code = 400
    default_message = "Invalid id"


class UnauthorizedError(InventoryError):
    """Raised when no valid session is attached to the request."""

    kind = "Unauthorized"
    status_code = 401
    default_message = "Unauthorized. Please login."


class ForbiddenError(InventoryError):
    """Raised when the caller is authenticated but lacks role or ownership."""

    kind = "Forbidden"
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(InventoryError):
    """Raised when a referenced entity does not exist."""

    kind = "NotFound"
    status_code = 404
    default_message = "Not found"


class EmailTakenError(InventoryError):
    """Raised when registering an email that already exists."""

    kind = "EmailTaken"
    status_code = 409
    default_message = "Email already registered"


class InvalidCredentialsError(InventoryError):
    """Raised when login fails.

    The message is the same for an unknown email and a wrong password.
    """

    kind = "InvalidCredentials"
    status_code = 401
    default_message = "Invalid credentials"


class InsufficientStockError(InventoryError):
    """Raised when a product does not have enough stock for an order."""

    kind = "InsufficientStock"
    status_code = 409
    default_message = "Not enough stock"


class InvalidStatusError(InventoryError):
    """Raised when an order status is outside the allowed set."""

    kind = "InvalidStatus"
    status_code = 400
    default_message = "Invalid status"


class StoreUnavailableError(InventoryError):
    """Raised when the underlying store fails."""

    kind = "StoreUnavailable"
    status_code = 503
    default_message = "Database error"
