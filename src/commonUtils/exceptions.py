from typing import Optional

from fastapi import status


class CartServiceError(Exception):
    """Base class for every classified failure raised by the services.

    The global exception handler turns these into the JSON envelope
    ``{"success": false, "message": ...}`` with ``status_code``.
    """
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ============= AUTH =============
class Unauthenticated(CartServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "No token provided"


class InvalidToken(CartServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid token"


# ============= NOT FOUND =============
class NotFoundError(CartServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class CartNotFound(NotFoundError):
    default_message = "Cart not found"


class WishlistNotFound(NotFoundError):
    default_message = "Wishlist not found"


class SavedCartNotFound(NotFoundError):
    default_message = "Saved cart not found"


class ItemNotFound(NotFoundError):
    default_message = "Item not found in cart"


# ============= OWNERSHIP =============
class Forbidden(CartServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


# ============= CLIENT INPUT =============
class InvalidInputError(CartServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class EmptyCart(InvalidInputError):
    default_message = "Cart is empty"


class InvalidDiscountCode(InvalidInputError):
    default_message = "Invalid discount code"


class DuplicateItem(InvalidInputError):
    default_message = "Item already in wishlist"


# ============= PERSISTENCE =============
class StoreFailure(CartServiceError):
    """Any error coming out of the document store; message is passed through."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
