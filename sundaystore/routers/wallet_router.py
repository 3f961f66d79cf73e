"""
Wallet API router

- GET  /wallets/{student_id}: wallet snapshot
- GET  /wallets/{student_id}/balance: one balance
- GET  /wallets/{student_id}/transactions: paged ledger, newest first
- GET  /wallets/{student_id}/integrity: ledger vs. cached balance (managers)
- POST /wallets/{student_id}/credit, /debit: manual ledger entries (managers);
  order_purchase and order_refund are refused with 422

Students can only read their own wallet.
"""

from decimal import Decimal

from fastapi import APIRouter, Depends, Path, Query

from sundaystore.core.auth_middleware import (
    ensure_student_access,
    get_current_actor,
    require_manager,
)
from sundaystore.core.exceptions import ValidationError
from sundaystore.deps import get_wallet_service
from sundaystore.models.wallet import Currency, TransactionReason
from sundaystore.schemas.actor import Actor
from sundaystore.schemas.pagination import PaginationLimits
from sundaystore.schemas.wallet import (
    BalanceResponse,
    WalletIntegrityCheckResponse,
    WalletLedgerResponse,
    WalletResponse,
    WalletTransactionRequest,
    WalletTransactionResponse,
)
from sundaystore.services.wallet_service import WalletService

router = APIRouter(prefix="/wallets", tags=["wallets"])

ORDER_OWNED_REASONS = (TransactionReason.ORDER_PURCHASE, TransactionReason.ORDER_REFUND)


@router.get("/{student_id}", response_model=WalletResponse)
def get_wallet(
    student_id: int = Path(..., gt=0),
    actor: Actor = Depends(get_current_actor),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> WalletResponse:
    ensure_student_access(actor, student_id)
    return wallet_service.get_wallet(student_id)


@router.get("/{student_id}/balance", response_model=BalanceResponse)
def get_balance(
    student_id: int = Path(..., gt=0),
    currency: Currency = Query(Currency.POINTS),
    actor: Actor = Depends(get_current_actor),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> BalanceResponse:
    ensure_student_access(actor, student_id)
    balance = wallet_service.get_balance(student_id, currency)
    return BalanceResponse(
        student_id=student_id, currency=currency, balance=Decimal(balance)
    )


@router.get("/{student_id}/transactions", response_model=WalletLedgerResponse)
def get_transactions(
    student_id: int = Path(..., gt=0),
    limit: int = Query(
        PaginationLimits.WALLET_LEDGER["default"],
        ge=PaginationLimits.WALLET_LEDGER["min"],
        le=PaginationLimits.WALLET_LEDGER["max"],
    ),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(get_current_actor),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> WalletLedgerResponse:
    """
    Paged ledger.

    GET /wallets/7/transactions?limit=20&offset=20  # entries 21-40
    """
    ensure_student_access(actor, student_id)
    return wallet_service.list_transactions(student_id, limit=limit, offset=offset)


@router.get("/{student_id}/integrity", response_model=WalletIntegrityCheckResponse)
def verify_integrity(
    student_id: int = Path(..., gt=0),
    actor: Actor = Depends(require_manager),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> WalletIntegrityCheckResponse:
    return wallet_service.verify_integrity(student_id)


def _check_manual_reason(request: WalletTransactionRequest) -> None:
    """Order entries are written only by the order workflow"""
    if request.reason in ORDER_OWNED_REASONS:
        raise ValidationError(
            f"Reason '{request.reason.value}' is reserved for order processing",
            details={"reason": request.reason.value},
        )


@router.post("/{student_id}/credit", response_model=WalletTransactionResponse)
def credit(
    request: WalletTransactionRequest,
    student_id: int = Path(..., gt=0),
    actor: Actor = Depends(require_manager),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> WalletTransactionResponse:
    _check_manual_reason(request)
    return wallet_service.credit(
        student_id=student_id,
        currency=request.currency,
        amount=request.amount,
        reason=request.reason,
        reference_id=request.reference_id,
        actor_id=actor.id,
        note=request.note,
    )


@router.post("/{student_id}/debit", response_model=WalletTransactionResponse)
def debit(
    request: WalletTransactionRequest,
    student_id: int = Path(..., gt=0),
    actor: Actor = Depends(require_manager),
    wallet_service: WalletService = Depends(get_wallet_service),
) -> WalletTransactionResponse:
    """400 BALANCE_001 when the balance cannot cover the amount"""
    _check_manual_reason(request)
    return wallet_service.debit(
        student_id=student_id,
        currency=request.currency,
        amount=request.amount,
        reason=request.reason,
        reference_id=request.reference_id,
        actor_id=actor.id,
        note=request.note,
    )
