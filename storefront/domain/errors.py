# storefront/domain/errors.py
"""
Hierarchia wyjatkow domeny.

Kazdy wyjatek niesie status HTTP, handler w api/errors.py zamienia go
na odpowiedz {success: false, message, errors?}.
"""
from typing import List


class StorefrontError(Exception):
    status_code = 500

    def __init__(self, message: str, errors: List[str] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class ValidationError(StorefrontError):
    status_code = 400


class UnauthorizedError(StorefrontError):
    status_code = 401


class ForbiddenError(StorefrontError):
    status_code = 403


class NotFoundError(StorefrontError):
    status_code = 404

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")
        self.resource = resource


class ConflictError(StorefrontError):
    status_code = 409


# walidacja
class EmptyCartError(ValidationError):
    def __init__(self):
        super().__init__("Cart is empty")


class NegativePointsError(ValidationError):
    def __init__(self):
        super().__init__("Points cannot be negative")


# not found
class OrderNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("Order")


# konflikty regul biznesowych
class InsufficientBalanceError(ConflictError):
    def __init__(self):
        super().__init__("Insufficient points balance")


class ExceedsCartValueError(ConflictError):
    def __init__(self, max_points):
        super().__init__(f"Cannot use more than {max_points:f} points for this purchase")
        self.max_points = max_points


class InsufficientStockError(ConflictError):
    def __init__(self, product_name: str, available: int | None = None):
        if available is None:
            message = f"{product_name} - not enough stock"
        else:
            message = f"{product_name} - only {available} available"
        super().__init__(message)


class CartUnavailableError(ConflictError):
    def __init__(self, problems: List[str]):
        super().__init__("Some products are unavailable", errors=problems)
        self.problems = problems


class InvalidCancelStateError(ConflictError):
    def __init__(self, status: str):
        super().__init__(
            f"Cannot cancel order with status '{status}'. Only pending orders can be cancelled."
        )
        self.status = status


class InvalidTransitionError(ConflictError):
    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot change order status from '{current}' to '{target}'")


class ConcurrencyConflictError(ConflictError):
    def __init__(self, resource: str):
        super().__init__(f"Concurrency conflict - {resource} was modified by another operation")


class CheckoutInProgressError(ConflictError):
    def __init__(self):
        super().__init__("Another checkout is already in progress for this user")
