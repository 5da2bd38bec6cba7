from datetime import datetime
from typing import Optional, List
from beanie import Document
from pydantic import BaseModel, Field

from src.models.cartModel import CartItem, utcnow


class SavedCartFields(BaseModel):
    user_id: str
    name: str
    items: List[CartItem] = Field(default_factory=list)
    total_amount: float = 0
    saved_at: datetime = Field(default_factory=utcnow)


class SavedCart(SavedCartFields):
    """Named snapshot of a cart kept for later ("save for later")"""
    id: Optional[str] = None


class SavedCartDocument(Document, SavedCartFields):

    class Settings:
        name = "saved_carts"
        indexes = [
            [("user_id", 1), ("saved_at", -1)],
        ]
