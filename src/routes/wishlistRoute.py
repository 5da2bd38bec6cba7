from typing import Optional

from fastapi import APIRouter, Depends

from src.crud.authService import current_user_id
from src.crud.wishlistService import WishlistService
from src.dependencies.service_dependencies import get_wishlist_service
from src.schemas.cartSchema import CartRead
from src.schemas.wishlistSchema import (
    WishlistRead, WishlistResponse, MoveToCartResponse, MovedToCartData,
    WishlistAddItemRequest, MoveToCartRequest,
)

router = APIRouter()


# ============= WISHLIST ROUTES =============
@router.get("/wishlist", response_model=WishlistResponse, response_model_exclude_none=True)
async def get_wishlist(
        user_id: str = Depends(current_user_id),
        wishlist_service: WishlistService = Depends(get_wishlist_service)
):
    """Get current user's wishlist"""
    wishlist = await wishlist_service.get_or_create_wishlist(user_id)
    return WishlistResponse(data=WishlistRead.from_model(wishlist))


@router.post("/wishlist/add", response_model=WishlistResponse, response_model_exclude_none=True)
async def add_to_wishlist(
        item: WishlistAddItemRequest,
        user_id: str = Depends(current_user_id),
        wishlist_service: WishlistService = Depends(get_wishlist_service)
):
    wishlist = await wishlist_service.add_item(
        user_id,
        product_id=item.product_id,
        sku=item.sku,
        name=item.name,
        unit_price=item.unit_price,
    )
    return WishlistResponse(message="Item added to wishlist", data=WishlistRead.from_model(wishlist))


@router.delete("/wishlist/remove/{product_id}", response_model=WishlistResponse, response_model_exclude_none=True)
async def remove_from_wishlist(
        product_id: str,
        user_id: str = Depends(current_user_id),
        wishlist_service: WishlistService = Depends(get_wishlist_service)
):
    wishlist = await wishlist_service.remove_item(user_id, product_id)
    return WishlistResponse(message="Item removed from wishlist", data=WishlistRead.from_model(wishlist))


@router.post("/wishlist/move-to-cart/{product_id}", response_model=MoveToCartResponse, response_model_exclude_none=True)
async def move_to_cart(
        product_id: str,
        request: Optional[MoveToCartRequest] = None,
        user_id: str = Depends(current_user_id),
        wishlist_service: WishlistService = Depends(get_wishlist_service)
):
    """Move a wishlist item into the cart (quantity defaults to 1)"""
    quantity = request.quantity if request else 1
    moved = await wishlist_service.move_to_cart(user_id, product_id, quantity)
    return MoveToCartResponse(
        message="Item moved to cart",
        data=MovedToCartData(
            cart=CartRead.from_model(moved["cart"]),
            wishlist=WishlistRead.from_model(moved["wishlist"]),
        ),
    )


@router.delete("/wishlist/clear", response_model=WishlistResponse, response_model_exclude_none=True)
async def clear_wishlist(
        user_id: str = Depends(current_user_id),
        wishlist_service: WishlistService = Depends(get_wishlist_service)
):
    wishlist = await wishlist_service.clear_wishlist(user_id)
    return WishlistResponse(message="Wishlist cleared", data=WishlistRead.from_model(wishlist))
