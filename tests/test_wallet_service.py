from decimal import Decimal

import pytest

from sundaystore.core.exceptions import (
    InsufficientFundsError,
    NotFoundError,
    ReferenceConflictError,
    ValidationError,
)
from sundaystore.models.wallet import Currency, TransactionReason, Wallet
from sundaystore.services.wallet_service import WalletService, normalize_amount


@pytest.fixture
def wallet_service(db, settings):
    return WalletService(db, settings)


class TestNormalizeAmount:
    def test_points_must_be_whole(self):
        assert normalize_amount(Currency.POINTS, 10) == 10
        assert normalize_amount(Currency.POINTS, Decimal("10.0")) == 10
        with pytest.raises(ValidationError):
            normalize_amount(Currency.POINTS, Decimal("10.5"))

    def test_cash_two_decimals(self):
        assert normalize_amount(Currency.CASH, Decimal("2.5")) == Decimal("2.50")
        with pytest.raises(ValidationError):
            normalize_amount(Currency.CASH, Decimal("2.505"))

    @pytest.mark.parametrize("amount", [0, -5, "abc"])
    def test_non_positive_or_garbage_rejected(self, amount):
        with pytest.raises(ValidationError):
            normalize_amount(Currency.POINTS, amount)


class TestWalletService:
    """WalletService against a real database"""

    def test_new_student_reads_as_zero(self, wallet_service, make_student):
        student = make_student()

        wallet = wallet_service.get_wallet(student.id)

        assert wallet.points_balance == 0
        assert wallet.cash_balance == Decimal("0")
        assert wallet_service.get_balance(student.id, Currency.POINTS) == 0

    def test_unknown_student(self, wallet_service):
        with pytest.raises(NotFoundError):
            wallet_service.get_wallet(12345)

    def test_credit_then_debit(self, wallet_service, make_student):
        student = make_student()

        credited = wallet_service.credit(
            student.id, Currency.POINTS, 100, TransactionReason.ATTENDANCE_AWARD,
            reference_id="attendance:1", actor_id=900,
        )
        assert credited.replayed is False
        assert credited.transaction.amount == Decimal("100")
        assert credited.transaction.balance_after == Decimal("100")
        assert credited.wallet.points_balance == 100

        debited = wallet_service.debit(
            student.id, Currency.POINTS, 30, TransactionReason.ORDER_PURCHASE,
            reference_id="77", actor_id=900,
        )
        assert debited.transaction.amount == Decimal("-30")
        assert debited.wallet.points_balance == 70

    def test_debit_to_exactly_zero(self, wallet_service, make_student):
        student = make_student(points=40)

        result = wallet_service.debit(
            student.id, Currency.POINTS, 40, TransactionReason.TEACHER_ADJUSTMENT
        )

        assert result.wallet.points_balance == 0

    def test_insufficient_funds_leaves_no_trace(self, wallet_service, make_student):
        student = make_student(points=50)

        with pytest.raises(InsufficientFundsError) as exc_info:
            wallet_service.debit(
                student.id, Currency.POINTS, 51, TransactionReason.ORDER_PURCHASE,
                reference_id="1",
            )

        assert exc_info.value.details["available"] == "50"
        assert wallet_service.get_balance(student.id, Currency.POINTS) == 50
        ledger = wallet_service.list_transactions(student.id)
        assert ledger.total_count == 1  # opening balance only

    def test_reference_applied_once(self, wallet_service, make_student):
        student = make_student()

        first = wallet_service.credit(
            student.id, Currency.POINTS, 10, TransactionReason.TRIP_AWARD,
            reference_id="trip:9",
        )
        second = wallet_service.credit(
            student.id, Currency.POINTS, 10, TransactionReason.TRIP_AWARD,
            reference_id="trip:9",
        )

        assert second.replayed is True
        assert second.transaction.id == first.transaction.id
        assert second.wallet.points_balance == 10

    def test_reference_reused_with_other_amount_is_conflict(self, wallet_service, make_student):
        student = make_student()
        wallet_service.credit(
            student.id, Currency.POINTS, 50, TransactionReason.TEACHER_ADJUSTMENT,
            reference_id="r1",
        )

        with pytest.raises(ReferenceConflictError):
            wallet_service.debit(
                student.id, Currency.POINTS, 30, TransactionReason.TEACHER_ADJUSTMENT,
                reference_id="r1",
            )
        with pytest.raises(ReferenceConflictError):
            wallet_service.credit(
                student.id, Currency.CASH, Decimal("50"), TransactionReason.TEACHER_ADJUSTMENT,
                reference_id="r1",
            )

        assert wallet_service.get_balance(student.id, Currency.POINTS) == 50
        assert wallet_service.get_balance(student.id, Currency.CASH) == Decimal("0")
        assert wallet_service.list_transactions(student.id).total_count == 1

    def test_same_reference_different_reason_is_separate(self, wallet_service, make_student):
        student = make_student(points=100)

        wallet_service.debit(
            student.id, Currency.POINTS, 20, TransactionReason.ORDER_PURCHASE,
            reference_id="5",
        )
        refund = wallet_service.credit(
            student.id, Currency.POINTS, 20, TransactionReason.ORDER_REFUND,
            reference_id="5",
        )

        assert refund.replayed is False
        assert refund.wallet.points_balance == 100

    def test_cash_balance_independent_of_points(self, wallet_service, make_student):
        student = make_student(points=10)

        result = wallet_service.credit(
            student.id, Currency.CASH, Decimal("12.50"), TransactionReason.TEACHER_ADJUSTMENT
        )

        assert result.wallet.cash_balance == Decimal("12.50")
        assert result.wallet.points_balance == 10
        with pytest.raises(InsufficientFundsError):
            wallet_service.debit(
                student.id, Currency.CASH, Decimal("13"), TransactionReason.ORDER_PURCHASE
            )

    def test_ledger_newest_first_and_paged(self, wallet_service, make_student):
        student = make_student()
        for n in range(1, 6):
            wallet_service.credit(
                student.id, Currency.POINTS, n, TransactionReason.ATTENDANCE_AWARD,
                reference_id=f"attendance:{n}",
            )

        page = wallet_service.list_transactions(student.id, limit=2, offset=0)

        assert page.total_count == 5
        assert page.has_next is True
        assert [entry.reference_id for entry in page.entries] == [
            "attendance:5",
            "attendance:4",
        ]
        last = wallet_service.list_transactions(student.id, limit=2, offset=4)
        assert last.has_next is False
        assert len(last.entries) == 1

    def test_ledger_limit_capped(self, db, make_student):
        from sundaystore.config import Settings

        service = WalletService(db, Settings(DATABASE_URL="sqlite://", LEDGER_PAGE_MAX=3))
        student = make_student()
        for n in range(5):
            service.credit(
                student.id, Currency.POINTS, 1, TransactionReason.ATTENDANCE_AWARD,
                reference_id=f"attendance:{n}",
            )

        page = service.list_transactions(student.id, limit=50)

        assert len(page.entries) == 3
        assert page.has_next is True

    def test_balance_matches_ledger_sum(self, wallet_service, make_student):
        student = make_student(points=200)
        wallet_service.debit(student.id, Currency.POINTS, 80, TransactionReason.ORDER_PURCHASE, reference_id="1")
        wallet_service.credit(student.id, Currency.POINTS, 15, TransactionReason.ATTENDANCE_AWARD, reference_id="attendance:1")
        wallet_service.credit(student.id, Currency.CASH, Decimal("3.25"), TransactionReason.TEACHER_ADJUSTMENT)

        report = wallet_service.verify_integrity(student.id)

        assert report.status == "OK"
        assert report.recorded_points == Decimal("135")
        assert report.calculated_points == Decimal("135")
        assert report.calculated_cash == Decimal("3.25")
        assert report.entry_count == 4

    def test_integrity_detects_out_of_band_write(self, db, wallet_service, make_student):
        student = make_student(points=100)
        db.query(Wallet).filter(Wallet.student_id == student.id).update(
            {Wallet.points_balance: 999}, synchronize_session=False
        )
        db.commit()

        report = wallet_service.verify_integrity(student.id)

        assert report.status == "MISMATCH"
        assert report.recorded_points == Decimal("999")
        assert report.calculated_points == Decimal("100")
