from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ProductOut(BaseModel):
    id: int
    name: str
    price: int
    stock: int


# Request bodies (from the front end)
class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    price: int
    stock: int = 0


class ProductUpdate(BaseModel):
    # no stock here: it only changes through relative updates
    name: str = Field(..., min_length=1, max_length=100)
    price: int


class StockAdjust(BaseModel):
    delta: int


class CheckoutItem(BaseModel):
    product_id: int
    quantity: int


class CheckoutRequest(BaseModel):
    items: List[CheckoutItem]


# Response bodies (to the front end)
class TransactionDetailOut(BaseModel):
    id: int
    transaction_id: int
    product_id: int
    product_name: str
    quantity: int
    subtotal: int


class TransactionOut(BaseModel):
    id: int
    total_amount: int
    created_at: datetime
    details: List[TransactionDetailOut]


class BestSellingProduct(BaseModel):
    name: str
    quantity_sold: int


class SalesSummary(BaseModel):
    total_revenue: int
    total_transactions: int
    best_selling: BestSellingProduct
    start: Optional[datetime] = None
    end: Optional[datetime] = None
