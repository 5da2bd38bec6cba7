from typing import Mapping

from fastapi import Depends

from src.config.database import document_store
from src.config.settings import settings
from src.crud.cartService import CartService
from src.crud.documentStore import DocumentStore
from src.crud.wishlistService import WishlistService


def get_document_store() -> DocumentStore:
    return document_store


def get_discount_codes() -> Mapping[str, float]:
    """Discount table; override this dependency to swap codes in tests"""
    return settings.DISCOUNT_CODES


def get_cart_service(
        store: DocumentStore = Depends(get_document_store),
        discount_codes: Mapping[str, float] = Depends(get_discount_codes),
) -> CartService:
    return CartService(store, discount_codes)


def get_wishlist_service(
        store: DocumentStore = Depends(get_document_store),
        cart_service: CartService = Depends(get_cart_service),
) -> WishlistService:
    return WishlistService(store, cart_service)
