from typing import Any, Dict, Iterable, List, Mapping, Optional
import logging

from src.commonUtils.exceptions import (
    CartNotFound,
    EmptyCart,
    Forbidden,
    ItemNotFound,
    SavedCartNotFound,
)
from src.crud import pricingService
from src.crud.documentStore import DocumentStore
from src.models.cartModel import Cart, CartItem, utcnow
from src.models.savedCartModel import SavedCart

logger = logging.getLogger(__name__)


class CartService:
    """Service layer for cart operations.

    Every method takes the authenticated user's id explicitly. Item mutations
    go through ``pricingService`` and end in ``_save`` so totals are always
    recomputed before the cart is written back.
    """

    def __init__(self, store: DocumentStore, discount_codes: Mapping[str, float]):
        self.store = store
        self.discount_codes = discount_codes

    async def _require_cart(self, user_id: str) -> Cart:
        cart = await self.store.carts.find_one(user_id)
        if not cart:
            raise CartNotFound()
        return cart

    async def _save(self, cart: Cart) -> Cart:
        pricingService.recalculate(cart)
        cart.updated_at = utcnow()
        return await self.store.carts.save(cart)

    async def get_or_create_cart(self, user_id: str) -> Cart:
        """Get existing cart or create new one"""
        cart = await self.store.carts.find_one(user_id)

        if not cart:
            cart = Cart(user_id=user_id, items=[])
            await self.store.carts.save(cart)

        return cart

    async def count_items(self, user_id: str) -> int:
        """Total quantity in the cart; does not create a cart"""
        cart = await self.store.carts.find_one(user_id)
        return sum(item.quantity for item in cart.items) if cart else 0

    async def add_item(
            self,
            user_id: str,
            product_id: str,
            sku: Optional[str],
            name: Optional[str],
            quantity: int,
            unit_price: float
    ) -> Cart:
        """Add item to cart or increase quantity if exists"""
        cart = await self.store.carts.find_one(user_id) or Cart(user_id=user_id, items=[])

        pricingService.merge_line(
            cart.items,
            CartItem(product_id=product_id, sku=sku, name=name, quantity=quantity, unit_price=unit_price)
        )

        return await self._save(cart)

    async def update_item_quantity(self, user_id: str, product_id: str, quantity: int) -> Cart:
        """Update quantity of item in cart; zero or less removes it"""
        cart = await self._require_cart(user_id)

        item = pricingService.find_item(cart.items, product_id)
        if not item:
            raise ItemNotFound()

        if quantity <= 0:
            cart.items = [item for item in cart.items if item.product_id != product_id]
        else:
            item.quantity = quantity
            item.total_price = pricingService.line_total(quantity, item.unit_price)

        return await self._save(cart)

    async def remove_item(self, user_id: str, product_id: str) -> Cart:
        """Remove item from cart entirely"""
        cart = await self._require_cart(user_id)
        cart.items = [item for item in cart.items if item.product_id != product_id]
        return await self._save(cart)

    async def apply_discount(self, user_id: str, code: str) -> Cart:
        cart = await self._require_cart(user_id)
        pricingService.apply_discount(cart, code, self.discount_codes)
        cart.updated_at = utcnow()
        return await self.store.carts.save(cart)

    async def remove_discount(self, user_id: str) -> Cart:
        cart = await self._require_cart(user_id)
        pricingService.remove_discount(cart)
        cart.updated_at = utcnow()
        return await self.store.carts.save(cart)

    async def validate_cart(self, user_id: str) -> Dict[str, Any]:
        """Checkout pre-flight.

        Stock is owned by the inventory service, so every item is reported
        available once the cart is known to be non-empty.
        """
        cart = await self.store.carts.find_one(user_id)

        if not cart or not cart.items:
            raise EmptyCart()

        unavailable_items: List[CartItem] = []
        return {
            "is_valid": not unavailable_items,
            "unavailable_items": unavailable_items,
        }

    async def clear_cart(self, user_id: str) -> Cart:
        """Clear all items from cart and drop any discount"""
        cart = await self._require_cart(user_id)
        cart.items = []
        cart.total_amount = 0
        cart.discount = 0
        cart.discount_code = None
        cart.final_amount = 0
        cart.updated_at = utcnow()
        return await self.store.carts.save(cart)

    async def merge_guest_cart(self, user_id: str, guest_items: Iterable[CartItem]) -> Cart:
        """Fold a guest session's items into the user's cart (after login)"""
        cart = await self.store.carts.find_one(user_id) or Cart(user_id=user_id, items=[])

        for guest_item in guest_items:
            pricingService.merge_line(cart.items, guest_item.model_copy())

        return await self._save(cart)

    # ============= SAVED CARTS =============
    async def save_for_later(self, user_id: str, name: Optional[str] = None) -> SavedCart:
        cart = await self.store.carts.find_one(user_id)

        if not cart or not cart.items:
            raise EmptyCart()

        saved_at = utcnow()
        saved_cart = SavedCart(
            user_id=user_id,
            name=name or f"Saved Cart {int(saved_at.timestamp() * 1000)}",
            items=[item.model_copy() for item in cart.items],
            total_amount=cart.total_amount,
            saved_at=saved_at,
        )
        await self.store.saved_carts.save(saved_cart)

        logger.info(f"User {user_id} saved cart {saved_cart.id} ({len(saved_cart.items)} items)")
        return saved_cart

    async def list_saved_carts(self, user_id: str) -> List[SavedCart]:
        """Saved carts, newest first"""
        return await self.store.saved_carts.find_many(user_id, sort=("saved_at", -1))

    async def _get_owned_saved_cart(self, user_id: str, saved_cart_id: str) -> SavedCart:
        saved_cart = await self.store.saved_carts.find_by_id(saved_cart_id)

        if not saved_cart:
            raise SavedCartNotFound()

        if saved_cart.user_id != user_id:
            logger.warning(f"User {user_id} tried to access saved cart {saved_cart_id} of another user")
            raise Forbidden()

        return saved_cart

    async def restore_saved_cart(self, user_id: str, saved_cart_id: str) -> Cart:
        """Replace the active cart's contents with a snapshot.

        The active cart's discount survives the restore.
        """
        saved_cart = await self._get_owned_saved_cart(user_id, saved_cart_id)

        cart = await self.store.carts.find_one(user_id) or Cart(user_id=user_id, items=[])

        cart.items = [item.model_copy() for item in saved_cart.items]
        cart.total_amount = saved_cart.total_amount
        cart.final_amount = pricingService.final_amount(cart.total_amount, cart.discount)
        cart.updated_at = utcnow()

        return await self.store.carts.save(cart)

    async def delete_saved_cart(self, user_id: str, saved_cart_id: str) -> None:
        saved_cart = await self._get_owned_saved_cart(user_id, saved_cart_id)
        await self.store.saved_carts.delete(saved_cart.id)
        logger.info(f"User {user_id} deleted saved cart {saved_cart_id}")
