from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from src.schemas.baseSchema import ApiModel, ApiResponse
from src.schemas.cartSchema import CartRead


# ============= WISHLIST SCHEMAS =============
class WishlistItemSchema(ApiModel):
    """Schema for wishlist item"""
    product_id: str
    sku: Optional[str] = None
    name: Optional[str] = None
    unit_price: float
    added_at: datetime


class WishlistRead(ApiModel):
    """Schema for reading wishlist"""
    id: str = Field(..., alias="_id")
    user_id: str
    items: List[WishlistItemSchema]
    updated_at: datetime

    @classmethod
    def from_model(cls, model: BaseModel) -> "WishlistRead":
        return cls.model_validate(model.model_dump())


class WishlistAddItemRequest(ApiModel):
    product_id: str = Field(..., min_length=1)
    sku: Optional[str] = None
    name: Optional[str] = None
    unit_price: float = Field(..., ge=0)


class MoveToCartRequest(ApiModel):
    quantity: int = Field(1, ge=1)


class WishlistResponse(ApiResponse):
    data: WishlistRead


class MovedToCartData(ApiModel):
    cart: CartRead
    wishlist: WishlistRead


class MoveToCartResponse(ApiResponse):
    data: MovedToCartData
