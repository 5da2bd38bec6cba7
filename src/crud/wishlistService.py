from typing import Dict, Optional

from src.commonUtils.exceptions import DuplicateItem, ItemNotFound, WishlistNotFound
from src.crud.cartService import CartService
from src.crud.documentStore import DocumentStore
from src.models.cartModel import Cart, utcnow
from src.models.wishlistModel import Wishlist, WishlistItem


class WishlistService:
    """Service layer for wishlist operations"""

    def __init__(self, store: DocumentStore, cart_service: CartService):
        self.store = store
        self.cart_service = cart_service

    async def _require_wishlist(self, user_id: str) -> Wishlist:
        wishlist = await self.store.wishlists.find_one(user_id)
        if not wishlist:
            raise WishlistNotFound()
        return wishlist

    async def _save(self, wishlist: Wishlist) -> Wishlist:
        wishlist.updated_at = utcnow()
        return await self.store.wishlists.save(wishlist)

    async def get_or_create_wishlist(self, user_id: str) -> Wishlist:
        wishlist = await self.store.wishlists.find_one(user_id)

        if not wishlist:
            wishlist = Wishlist(user_id=user_id, items=[])
            await self.store.wishlists.save(wishlist)

        return wishlist

    async def add_item(
            self,
            user_id: str,
            product_id: str,
            sku: Optional[str],
            name: Optional[str],
            unit_price: float
    ) -> Wishlist:
        wishlist = await self.store.wishlists.find_one(user_id) or Wishlist(user_id=user_id, items=[])

        if any(item.product_id == product_id for item in wishlist.items):
            raise DuplicateItem()

        wishlist.items.append(
            WishlistItem(product_id=product_id, sku=sku, name=name, unit_price=unit_price)
        )
        return await self._save(wishlist)

    async def remove_item(self, user_id: str, product_id: str) -> Wishlist:
        wishlist = await self._require_wishlist(user_id)
        wishlist.items = [item for item in wishlist.items if item.product_id != product_id]
        return await self._save(wishlist)

    async def move_to_cart(self, user_id: str, product_id: str, quantity: int = 1) -> Dict[str, object]:
        """Move one wishlist item into the active cart.

        The wishlist's recorded price is used for a new cart line; a line the
        cart already holds keeps its own price and just gains quantity.
        """
        wishlist = await self._require_wishlist(user_id)

        item = next(
            (item for item in wishlist.items if item.product_id == product_id),
            None
        )
        if not item:
            raise ItemNotFound("Item not found in wishlist")

        cart: Cart = await self.cart_service.add_item(
            user_id,
            product_id=item.product_id,
            sku=item.sku,
            name=item.name,
            quantity=quantity,
            unit_price=item.unit_price,
        )

        wishlist.items = [entry for entry in wishlist.items if entry.product_id != product_id]
        wishlist = await self._save(wishlist)

        return {"cart": cart, "wishlist": wishlist}

    async def clear_wishlist(self, user_id: str) -> Wishlist:
        wishlist = await self._require_wishlist(user_id)
        wishlist.items = []
        return await self._save(wishlist)
