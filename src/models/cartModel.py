from datetime import datetime, timezone
from typing import Optional, List
from beanie import Document
from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CartItem(BaseModel):
    """Individual line item in a cart or saved cart"""
    product_id: str
    sku: Optional[str] = None
    name: Optional[str] = None
    quantity: int = Field(1, ge=1)
    unit_price: float = 0
    total_price: float = 0


class CartFields(BaseModel):
    user_id: str
    items: List[CartItem] = Field(default_factory=list)
    total_amount: float = 0
    discount: float = 0
    discount_code: Optional[str] = None
    final_amount: float = 0
    updated_at: datetime = Field(default_factory=utcnow)


class Cart(CartFields):
    """Shopping cart for a user"""
    id: Optional[str] = None


class CartDocument(Document, CartFields):
    """Mongo representation of a Cart"""

    class Settings:
        name = "carts"
        indexes = [
            [("user_id", 1)],  # Fast lookup by user
        ]
