"""
Cart arithmetic.

Everything here is pure: no I/O, no clock. The services call ``recalculate``
after every item mutation so that

    total_amount == sum(item.total_price for item in items)
    final_amount == total_amount - discount

always hold on a persisted cart.
"""
from typing import Iterable, List, Mapping, Optional

from src.commonUtils.exceptions import InvalidDiscountCode
from src.models.cartModel import Cart, CartItem


def line_total(quantity: int, unit_price: float) -> float:
    return quantity * unit_price


def cart_total_amount(items: Iterable[CartItem]) -> float:
    return sum(item.total_price for item in items)


def final_amount(total_amount: float, discount: float) -> float:
    return total_amount - discount


def recalculate(cart: Cart) -> Cart:
    """Refresh total_amount and final_amount from the current items.

    The discount is an absolute amount fixed when the code was applied; it is
    not rescaled here.
    """
    cart.total_amount = cart_total_amount(cart.items)
    cart.final_amount = final_amount(cart.total_amount, cart.discount)
    return cart


def find_item(items: List[CartItem], product_id: str) -> Optional[CartItem]:
    return next(
        (item for item in items if item.product_id == product_id),
        None
    )


def merge_line(items: List[CartItem], incoming: CartItem) -> CartItem:
    """Merge ``incoming`` into ``items`` by product identity.

    A product already on the list keeps its stored unit price and only gains
    quantity; the incoming price is ignored. Otherwise ``incoming`` is
    appended with its own price.
    """
    existing = find_item(items, incoming.product_id)

    if existing:
        existing.quantity += incoming.quantity
        existing.total_price = line_total(existing.quantity, existing.unit_price)
        return existing

    incoming.total_price = line_total(incoming.quantity, incoming.unit_price)
    items.append(incoming)
    return incoming


def apply_discount(cart: Cart, code: str, discount_codes: Mapping[str, float]) -> Cart:
    """Apply a percentage code; an unknown code leaves the cart untouched."""
    normalised_code = code.upper()
    rate = discount_codes.get(normalised_code)

    if rate is None:
        raise InvalidDiscountCode()

    cart.discount = cart.total_amount * rate
    cart.discount_code = normalised_code
    cart.final_amount = final_amount(cart.total_amount, cart.discount)
    return cart


def remove_discount(cart: Cart) -> Cart:
    cart.discount = 0
    cart.discount_code = None
    cart.final_amount = cart.total_amount
    return cart
