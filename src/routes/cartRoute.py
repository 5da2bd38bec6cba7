from typing import Optional

from fastapi import APIRouter, Depends

from src.crud.authService import current_user_id
from src.crud.cartService import CartService
from src.dependencies.service_dependencies import get_cart_service
from src.schemas.baseSchema import ApiResponse
from src.schemas.cartSchema import (
    CartRead, SavedCartRead,
    CartResponse, CartCountResponse, CartValidationResponse,
    SavedCartResponse, SavedCartListResponse,
    CartAddItemRequest, CartUpdateItemRequest, ApplyDiscountRequest,
    SaveCartRequest, MergeCartRequest,
)

router = APIRouter()


# ============= CART ROUTES =============
@router.get("/cart", response_model=CartResponse, response_model_exclude_none=True)
async def get_cart(
        user_id: str = Depends(current_user_id),
        cart_service: CartService = Depends(get_cart_service)
):
    """Get current user's cart, creating an empty one on first access"""
    cart = await cart_service.get_or_create_cart(user_id)
    return CartResponse(data=CartRead.from_model(cart))


@router.get("/cart/count", response_model=CartCountResponse, response_model_exclude_none=True)
async def get_cart_count(
        user_id: str = Depends(current_user_id),
        cart_service: CartService = Depends(get_cart_service)
):
    """Number of units in the cart (badge counter)"""
    count = await cart_service.count_items(user_id)
    return CartCountResponse(count=count)


@router.post("/cart/add", response_model=CartResponse, response_model_exclude_none=True)
async def add_to_cart(
        item: CartAddItemRequest,
        user_id: str = Depends(current_user_id),
        cart_service: CartService = Depends(get_cart_service)
):
    """Add item to cart"""
    cart = await cart_service.add_item(
        user_id,
        product_id=item.product_id,
        sku=item.sku,
        name=item.name,
        quantity=item.quantity,
        unit_price=item.unit_price,
    )
    return CartResponse(message="Item added to cart", data=CartRead.from_model(cart))


@router.put("/cart/update/{product_id}", response_model=CartResponse, response_model_exclude_none=True)
async def update_cart_item(
        product_id: str,
        update: CartUpdateItemRequest,
        user_id: str = Depends(current_user_id),
        cart_service: CartService = Depends(get_cart_service)
):
    """Update quantity of item in cart"""
    cart = await cart_service.update_item_quantity(user_id, product_id, update.quantity)
    return CartResponse(message="Cart updated", data=CartRead.from_model(cart))


@router.delete("/cart/remove/{product_id}", response_model=CartResponse, response_model_exclude_none=True)
async def remove_from_cart(
        product_id: str,
        user_id: str = Depends(current_user_id),
        cart_service: CartService = Depends(get_cart_service)
):
    """Remove item from cart"""
    cart = await cart_service.remove_item(user_id, product_id)
    return CartResponse(message="Item removed from cart", data=CartRead.from_model(cart))


@router.post("/cart/apply-discount", response_model=CartResponse, response_model_exclude_none=True)
async def apply_discount(
        request: ApplyDiscountRequest,
        user_id: str = Depends(current_user_id),
        cart_service: CartService = Depends(get_cart_service)
):
    cart = await cart_service.apply_discount(user_id, request.code)
    return CartResponse(message="Discount applied successfully", data=CartRead.from_model(cart))


@router.delete("/cart/remove-discount", response_model=CartResponse, response_model_exclude_none=True)
async def remove_discount(
        user_id: str = Depends(current_user_id),
        cart_service: CartService = Depends(get_cart_service)
):
    cart = await cart_service.remove_discount(user_id)
    return CartResponse(message="Discount removed", data=CartRead.from_model(cart))


@router.post("/cart/validate", response_model=CartValidationResponse, response_model_exclude_none=True)
async def validate_cart(
        user_id: str = Depends(current_user_id),
        cart_service: CartService = Depends(get_cart_service)
):
    """Check the cart is ready for checkout"""
    result = await cart_service.validate_cart(user_id)
    return CartValidationResponse(
        message="Cart is valid" if result["is_valid"] else "Some items are unavailable",
        is_valid=result["is_valid"],
        unavailable_items=[item.model_dump() for item in result["unavailable_items"]],
    )


@router.post("/cart/save", response_model=SavedCartResponse, response_model_exclude_none=True)
async def save_cart(
        request: Optional[SaveCartRequest] = None,
        user_id: str = Depends(current_user_id),
        cart_service: CartService = Depends(get_cart_service)
):
    """Snapshot the current cart for later"""
    name = request.name if request else None
    saved_cart = await cart_service.save_for_later(user_id, name)
    return SavedCartResponse(message="Cart saved successfully", data=SavedCartRead.from_model(saved_cart))


@router.get("/cart/saved", response_model=SavedCartListResponse, response_model_exclude_none=True)
async def list_saved_carts(
        user_id: str = Depends(current_user_id),
        cart_service: CartService = Depends(get_cart_service)
):
    saved_carts = await cart_service.list_saved_carts(user_id)
    return SavedCartListResponse(data=[SavedCartRead.from_model(saved_cart) for saved_cart in saved_carts])


@router.post("/cart/restore/{saved_cart_id}", response_model=CartResponse, response_model_exclude_none=True)
async def restore_saved_cart(
        saved_cart_id: str,
        user_id: str = Depends(current_user_id),
        cart_service: CartService = Depends(get_cart_service)
):
    cart = await cart_service.restore_saved_cart(user_id, saved_cart_id)
    return CartResponse(message="Cart restored successfully", data=CartRead.from_model(cart))


@router.delete("/cart/saved/{saved_cart_id}", response_model=ApiResponse, response_model_exclude_none=True)
async def delete_saved_cart(
        saved_cart_id: str,
        user_id: str = Depends(current_user_id),
        cart_service: CartService = Depends(get_cart_service)
):
    await cart_service.delete_saved_cart(user_id, saved_cart_id)
    return ApiResponse(message="Saved cart deleted successfully")


@router.post("/cart/merge", response_model=CartResponse, response_model_exclude_none=True)
async def merge_carts(
        request: MergeCartRequest,
        user_id: str = Depends(current_user_id),
        cart_service: CartService = Depends(get_cart_service)
):
    """Merge a guest session's cart into the user's cart (after login)"""
    cart = await cart_service.merge_guest_cart(
        user_id,
        [guest_item.to_model() for guest_item in request.guest_cart]
    )
    return CartResponse(message="Carts merged successfully", data=CartRead.from_model(cart))


@router.delete("/cart/clear", response_model=CartResponse, response_model_exclude_none=True)
async def clear_cart(
        user_id: str = Depends(current_user_id),
        cart_service: CartService = Depends(get_cart_service)
):
    """Clear entire cart"""
    cart = await cart_service.clear_cart(user_id)
    return CartResponse(message="Cart cleared", data=CartRead.from_model(cart))
