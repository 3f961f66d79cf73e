from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from sundaystore.models.store import StockMovementReason


class StoreItemCreateRequest(BaseModel):
    """New store item (admin)"""

    store_id: int = Field(..., gt=0, description="Store ID")
    name: str = Field(..., min_length=1, max_length=200, description="Item name")
    description: Optional[str] = Field(None, max_length=1000)
    price_points: int = Field(0, ge=0, description="Price in points")
    price_cash: Decimal = Field(Decimal("0"), ge=0, decimal_places=2, description="Price in cash")
    stock_quantity: int = Field(0, ge=0, description="Initial stock")
    requires_approval: bool = Field(True, description="Orders wait for manager approval")
    is_active: bool = Field(True)

    @model_validator(mode="after")
    def _has_price(self):
        if self.price_points <= 0 and self.price_cash <= 0:
            raise ValueError("At least one of price_points or price_cash must be positive")
        return self


class StoreItemUpdateRequest(BaseModel):
    """Catalog edits. Stock changes go through restock / orders."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    price_points: Optional[int] = Field(None, ge=0)
    price_cash: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    requires_approval: Optional[bool] = None
    is_active: Optional[bool] = None


class StoreItemResponse(BaseModel):
    id: int
    store_id: int
    name: str
    description: Optional[str] = None
    price_points: int
    price_cash: Decimal
    stock_quantity: int
    requires_approval: bool
    is_active: bool
    is_available: bool = Field(..., description="Active and in stock")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StoreCatalogResponse(BaseModel):
    items: List[StoreItemResponse]
    total_count: int


class RestockRequest(BaseModel):
    quantity: int = Field(..., gt=0, description="Units to add")


class StockMovementEntry(BaseModel):
    id: int
    store_item_id: int
    order_id: Optional[int] = None
    delta: int
    reason: StockMovementReason
    actor_id: Optional[int] = None
    stock_after: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
