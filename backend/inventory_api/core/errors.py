"""Domain error taxonomy shared by the rule layers and the HTTP boundary.

Each error carries the HTTP status it maps to so the exception handlers in
``inventory_api.api.errors`` can shape the response envelope without
knowing about individual error types.
"""

from __future__ import annotations

from typing import Any


class InventoryError(Exception):
    """Base class for all recoverable rule-layer failures."""

    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailure(InventoryError):
    """Malformed or missing input, optionally with field-level detail."""

    status_code = 400
    default_message = "Validation failed"

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.errors = errors or []


class Conflict(InventoryError):
    status_code = 409
    default_message = "Resource already exists"


class DuplicateSKU(Conflict):
    default_message = "Product with this SKU already exists"


class EmailAlreadyRegistered(Conflict):
    default_message = "User already exists with this email"


class NotFoundOrForbidden(InventoryError):
    """Raised for both absent and inaccessible resources."""

    status_code = 404
    default_message = "Product not found or access denied"


class AuthFailure(InventoryError):
    status_code = 401
    default_message = "Authentication failed"


class InvalidCredentials(AuthFailure):
    default_message = "Invalid email or password"


class InvalidToken(AuthFailure):
    default_message = "Invalid or expired token"


class TokenExpired(InvalidToken):
    default_message = "Token expired"


class UserInactive(AuthFailure):
    default_message = "User not found or inactive"


class AccountDeactivated(AuthFailure):
    status_code = 403
    default_message = "Account is deactivated. Please contact support"


class PermissionDenied(AuthFailure):
    status_code = 403
    default_message = "Insufficient permissions"


class InvariantViolation(InventoryError):
    status_code = 400
    default_message = "Invariant violated"


class NegativeQuantity(InvariantViolation):
    default_message = "Quantity cannot be negative"


class InsufficientStock(InvariantViolation):
    default_message = "Insufficient stock for this adjustment"


class RateLimited(InventoryError):
    status_code = 429
    default_message = "Too many requests from this IP, please try again later"
