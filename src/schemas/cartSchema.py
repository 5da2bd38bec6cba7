from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from src.models.cartModel import CartItem
from src.schemas.baseSchema import ApiModel, ApiResponse


# ============= CART SCHEMAS =============
class CartItemSchema(ApiModel):
    """Line item as sent by clients and returned by the API"""
    product_id: str
    sku: Optional[str] = None
    name: Optional[str] = None
    quantity: int = Field(1, ge=1)
    unit_price: float = Field(..., ge=0)
    total_price: Optional[float] = None

    def to_model(self) -> CartItem:
        return CartItem(**self.model_dump(exclude={"total_price"}))


class CartRead(ApiModel):
    """Schema for reading cart"""
    id: str = Field(..., alias="_id")
    user_id: str
    items: List[CartItemSchema]
    total_amount: float
    discount: float
    discount_code: Optional[str] = None
    final_amount: float
    updated_at: datetime

    @classmethod
    def from_model(cls, model: BaseModel) -> "CartRead":
        return cls.model_validate(model.model_dump())


class SavedCartRead(ApiModel):
    id: str = Field(..., alias="_id")
    user_id: str
    name: str
    items: List[CartItemSchema]
    total_amount: float
    saved_at: datetime

    @classmethod
    def from_model(cls, model: BaseModel) -> "SavedCartRead":
        return cls.model_validate(model.model_dump())


# ============= REQUEST BODIES =============
class CartAddItemRequest(ApiModel):
    product_id: str = Field(..., min_length=1)
    sku: Optional[str] = None
    name: Optional[str] = None
    quantity: int = Field(1, ge=1)
    unit_price: float = Field(..., ge=0)


class CartUpdateItemRequest(ApiModel):
    # zero or negative removes the line
    quantity: int


class ApplyDiscountRequest(ApiModel):
    code: str = Field(..., min_length=1)


class SaveCartRequest(ApiModel):
    name: Optional[str] = None


class MergeCartRequest(ApiModel):
    """Items collected in an anonymous session, merged after login"""
    guest_cart: List[CartItemSchema] = Field(default_factory=list)


# ============= RESPONSES =============
class CartResponse(ApiResponse):
    data: CartRead


class CartCountResponse(ApiResponse):
    count: int


class CartValidationResponse(ApiResponse):
    is_valid: bool
    unavailable_items: List[CartItemSchema] = Field(default_factory=list)


class SavedCartResponse(ApiResponse):
    data: SavedCartRead


class SavedCartListResponse(ApiResponse):
    data: List[SavedCartRead]
