from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from sundaystore.models.order import OrderStatus
from sundaystore.models.wallet import Currency
from sundaystore.schemas.wallet import WalletResponse


class OrderCreateRequest(BaseModel):
    """Single-item order"""

    student_id: int = Field(..., gt=0, description="Ordering student")
    store_item_id: int = Field(..., gt=0, description="Store item")
    quantity: int = Field(1, gt=0, description="Units")
    payment_method: Currency = Field(Currency.POINTS, description="points or cash")
    notes: Optional[str] = Field(None, max_length=1000)


class OrderLineRequest(BaseModel):
    store_item_id: int = Field(..., gt=0)
    quantity: int = Field(1, gt=0)


class MultiItemOrderCreateRequest(BaseModel):
    """Order with several lines"""

    student_id: int = Field(..., gt=0)
    items: List[OrderLineRequest] = Field(..., min_length=1)
    payment_method: Currency = Field(Currency.POINTS)
    notes: Optional[str] = Field(None, max_length=1000)


class OrderActionRequest(BaseModel):
    admin_notes: Optional[str] = Field(None, max_length=1000)


class OrderItemResponse(BaseModel):
    id: int
    store_item_id: int
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    student_id: int
    store_item_id: Optional[int] = None
    quantity: int
    payment_method: Currency
    total_points: int
    total_cash: Decimal
    status: OrderStatus
    notes: Optional[str] = None
    admin_notes: Optional[str] = None
    updated_by: Optional[int] = None
    items: List[OrderItemResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrderActionResponse(BaseModel):
    """Order snapshot after a transition; ledger fields set on purchase"""

    order: OrderResponse
    transaction_id: Optional[int] = Field(None, description="Wallet transaction for the purchase")
    wallet: Optional[WalletResponse] = None


class OrderListResponse(BaseModel):
    orders: List[OrderResponse]
    total_count: int
    has_next: bool
