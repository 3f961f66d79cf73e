"""
Wallet repository - ledger primitives

Every balance change goes through ``apply_transaction``:
1. an existing (student, reason, reference) entry short-circuits the call
   (idempotency); it must carry the same currency and signed amount
2. one conditional UPDATE changes the cached balance; debits carry
   ``balance >= amount`` in the WHERE clause so the check and the write are
   a single atomic statement
3. the ledger entry is inserted in the same savepoint; a unique-constraint
   race rolls back both and returns the entry that won

Nothing else in the code base writes ``points_balance`` or ``cash_balance``.
"""

from decimal import Decimal
from typing import Dict, List, Optional, Tuple, Union

from sqlalchemy import desc, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sundaystore.core.exceptions import InsufficientFundsError, ReferenceConflictError
from sundaystore.models.wallet import (
    Currency,
    TransactionReason,
    Wallet as WalletModel,
    WalletTransaction as WalletTransactionModel,
)
from sundaystore.repositories.base import BaseRepository
from sundaystore.schemas.wallet import WalletResponse, WalletTransactionEntry

Amount = Union[int, Decimal]


class WalletRepository(BaseRepository[WalletModel, WalletResponse]):
    """Wallets and the append-only transaction log"""

    def __init__(self, db: Session):
        super().__init__(WalletModel, WalletResponse, db)

    @staticmethod
    def _balance_column(currency: Currency):
        if currency == Currency.POINTS:
            return WalletModel.points_balance
        return WalletModel.cash_balance

    def _to_entry(self, model_instance: WalletTransactionModel) -> WalletTransactionEntry:
        return WalletTransactionEntry.model_validate(model_instance)

    def get_wallet(self, student_id: int) -> Optional[WalletResponse]:
        wallet = self._query().filter(WalletModel.student_id == student_id).first()
        return self._to_schema(wallet)

    def get_or_create_wallet(self, student_id: int) -> WalletResponse:
        """Wallets are created lazily with zero balances on first use"""
        wallet = self.get_wallet(student_id)
        if wallet:
            return wallet

        try:
            with self.db.begin_nested():
                self.db.add(
                    WalletModel(
                        student_id=student_id,
                        points_balance=0,
                        cash_balance=Decimal("0"),
                    )
                )
        except IntegrityError:
            # created by a concurrent request; fall through and read it
            pass

        wallet = self.get_wallet(student_id)
        if wallet is None:
            raise RuntimeError(f"Wallet for student {student_id} could not be created")
        return wallet

    def get_balance(self, student_id: int, currency: Currency) -> Amount:
        """Cached balance; 0 for a student without a wallet"""
        column = self._balance_column(currency)
        value = (
            self.db.query(column).filter(WalletModel.student_id == student_id).scalar()
        )
        if value is None:
            return 0 if currency == Currency.POINTS else Decimal("0")
        return value

    def find_transaction(
        self, student_id: int, reason: TransactionReason, reference_id: str
    ) -> Optional[WalletTransactionEntry]:
        entry = (
            self.db.query(WalletTransactionModel)
            .filter(
                WalletTransactionModel.student_id == student_id,
                WalletTransactionModel.reason == reason,
                WalletTransactionModel.reference_id == reference_id,
            )
            .first()
        )
        return self._to_entry(entry) if entry else None

    @staticmethod
    def _check_replay(
        existing: WalletTransactionEntry, currency: Currency, delta: Amount
    ) -> WalletTransactionEntry:
        if existing.currency != currency or existing.amount != Decimal(delta):
            raise ReferenceConflictError(
                reference_id=existing.reference_id,
                reason=existing.reason.value,
                existing_amount=existing.amount,
                requested_amount=delta,
            )
        return existing

    def apply_transaction(
        self,
        student_id: int,
        currency: Currency,
        delta: Amount,
        reason: TransactionReason,
        reference_id: Optional[str] = None,
        actor_id: Optional[int] = None,
        note: Optional[str] = None,
        commit: bool = True,
    ) -> Tuple[WalletTransactionEntry, bool]:
        """
        Apply a signed change to one balance and record it in the ledger.

        Args:
            delta: positive for credit, negative for debit (never zero)
            commit: False when the caller owns the surrounding transaction

        Returns:
            (entry, replayed) - replayed is True when the reference had already
            been applied and nothing was changed

        Raises:
            InsufficientFundsError: a debit larger than the current balance
            ReferenceConflictError: the reference was applied with another amount
        """
        if reference_id is not None:
            existing = self.find_transaction(student_id, reason, reference_id)
            if existing:
                return self._check_replay(existing, currency, delta), True

        self.get_or_create_wallet(student_id)
        column = self._balance_column(currency)

        try:
            with self.db.begin_nested():
                query = self.db.query(WalletModel).filter(
                    WalletModel.student_id == student_id
                )
                if delta < 0:
                    query = query.filter(column >= -delta)

                updated_count = query.update(
                    {column: column + delta}, synchronize_session=False
                )
                if updated_count == 0:
                    raise InsufficientFundsError(
                        currency=currency.value,
                        required=-delta,
                        available=self.get_balance(student_id, currency),
                    )

                balance_after = self.get_balance(student_id, currency)
                entry = WalletTransactionModel(
                    student_id=student_id,
                    amount=Decimal(delta),
                    currency=currency,
                    reason=reason,
                    reference_id=reference_id,
                    actor_id=actor_id,
                    balance_after=Decimal(balance_after),
                    note=note,
                )
                self.db.add(entry)
                self.db.flush()
        except IntegrityError:
            # same reference applied concurrently; the savepoint undid our update
            existing = (
                self.find_transaction(student_id, reason, reference_id)
                if reference_id is not None
                else None
            )
            if existing is None:
                raise
            return self._check_replay(existing, currency, delta), True

        self.db.refresh(entry)
        result = self._to_entry(entry)
        self._finish(commit)
        return result, False

    def count_transactions(self, student_id: int) -> int:
        return (
            self.db.query(func.count(WalletTransactionModel.id))
            .filter(WalletTransactionModel.student_id == student_id)
            .scalar()
            or 0
        )

    def list_transactions(
        self, student_id: int, limit: int = 50, offset: int = 0
    ) -> List[WalletTransactionEntry]:
        """Newest first"""
        entries = (
            self.db.query(WalletTransactionModel)
            .filter(WalletTransactionModel.student_id == student_id)
            .order_by(desc(WalletTransactionModel.id))
            .limit(limit)
            .offset(offset)
            .all()
        )
        return [self._to_entry(entry) for entry in entries]

    def sum_transactions(self, student_id: int) -> Dict[Currency, Decimal]:
        """Signed sum of the log per currency"""
        rows = (
            self.db.query(
                WalletTransactionModel.currency,
                func.sum(WalletTransactionModel.amount),
            )
            .filter(WalletTransactionModel.student_id == student_id)
            .group_by(WalletTransactionModel.currency)
            .all()
        )
        sums = {Currency.POINTS: Decimal("0"), Currency.CASH: Decimal("0")}
        for currency, total in rows:
            sums[currency] = Decimal(total or 0)
        return sums
