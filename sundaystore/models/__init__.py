from sundaystore.models.base import Base, BaseModel
from sundaystore.models.student import Student
from sundaystore.models.wallet import (
    Currency,
    TransactionReason,
    Wallet,
    WalletTransaction,
)
from sundaystore.models.store import StockMovement, StockMovementReason, StoreItem
from sundaystore.models.order import Order, OrderItem, OrderStatus
from sundaystore.models.points_config import ChurchPointsConfig

__all__ = [
    "Base",
    "BaseModel",
    "Student",
    "Currency",
    "TransactionReason",
    "Wallet",
    "WalletTransaction",
    "StockMovement",
    "StockMovementReason",
    "StoreItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "ChurchPointsConfig",
]
