from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from sundaystore.models.wallet import Currency, TransactionReason


class WalletResponse(BaseModel):
    """Wallet snapshot"""

    student_id: int = Field(..., description="Student ID")
    points_balance: int = Field(..., description="Current points balance")
    cash_balance: Decimal = Field(..., description="Current cash balance")

    class Config:
        from_attributes = True


class BalanceResponse(BaseModel):
    student_id: int
    currency: Currency
    balance: Decimal


class WalletTransactionEntry(BaseModel):
    """One immutable ledger entry"""

    id: int = Field(..., description="Transaction ID")
    student_id: int = Field(..., description="Student ID")
    amount: Decimal = Field(..., description="Signed amount")
    currency: Currency = Field(..., description="points or cash")
    reason: TransactionReason = Field(..., description="Why the balance changed")
    reference_id: Optional[str] = Field(None, description="Order / adjustment / award reference")
    actor_id: Optional[int] = Field(None, description="Who caused the change")
    balance_after: Decimal = Field(..., description="Balance of this currency after the entry")
    note: Optional[str] = Field(None, description="Free-form note")
    created_at: Optional[datetime] = Field(None, description="Creation time")

    class Config:
        from_attributes = True


class WalletTransactionResponse(BaseModel):
    """Result of a credit/debit"""

    transaction: WalletTransactionEntry
    wallet: WalletResponse
    replayed: bool = Field(
        False, description="True when the reference was already applied and nothing changed"
    )


class WalletLedgerResponse(BaseModel):
    """Paged ledger"""

    wallet: WalletResponse
    entries: List[WalletTransactionEntry]
    total_count: int
    has_next: bool


class WalletTransactionRequest(BaseModel):
    """Manual credit/debit by a manager"""

    currency: Currency = Field(Currency.POINTS, description="points or cash")
    amount: Decimal = Field(..., gt=0, description="Positive amount")
    reason: TransactionReason = Field(..., description="Ledger reason")
    reference_id: Optional[str] = Field(None, max_length=100, description="Idempotency reference")
    note: Optional[str] = Field(None, max_length=500)


class WalletIntegrityCheckResponse(BaseModel):
    """Cached balance vs. recomputed ledger sum"""

    status: str = Field(..., description="OK or MISMATCH")
    student_id: int
    calculated_points: Decimal
    recorded_points: Decimal
    calculated_cash: Decimal
    recorded_cash: Decimal
    entry_count: int
    verified_at: datetime
