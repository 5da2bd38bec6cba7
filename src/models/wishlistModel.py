from datetime import datetime
from typing import Optional, List
from beanie import Document
from pydantic import BaseModel, Field

from src.models.cartModel import utcnow


class WishlistItem(BaseModel):
    """Individual item in wishlist"""
    product_id: str
    sku: Optional[str] = None
    name: Optional[str] = None
    unit_price: float = 0
    added_at: datetime = Field(default_factory=utcnow)


class WishlistFields(BaseModel):
    user_id: str
    items: List[WishlistItem] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=utcnow)


class Wishlist(WishlistFields):
    """Wishlist for a user"""
    id: Optional[str] = None


class WishlistDocument(Document, WishlistFields):

    class Settings:
        name = "wishlists"
        indexes = [
            [("user_id", 1)],
        ]
