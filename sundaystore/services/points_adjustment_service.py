import uuid
from typing import Optional

from sqlalchemy.orm import Session

from sundaystore.config import Settings, settings as default_settings
from sundaystore.core.exceptions import (
    ExceedsMaxAdjustmentError,
    FeatureDisabledError,
    InsufficientFundsError,
    NotFoundError,
    ValidationError,
)
from sundaystore.models.wallet import Currency, TransactionReason
from sundaystore.repositories.student_repository import StudentRepository
from sundaystore.repositories.wallet_repository import WalletRepository
from sundaystore.schemas.points import PointsAdjustmentResponse
from sundaystore.services.points_config_service import PointsConfigService
import logging

logger = logging.getLogger(__name__)

MIN_NOTE_LENGTH = 3


class PointsAdjustmentService:
    """Manual teacher credits and debits, capped per adjustment"""

    def __init__(self, db: Session, settings: Settings = default_settings):
        self.db = db
        self.settings = settings
        self.wallet_repo = WalletRepository(db)
        self.student_repo = StudentRepository(db)
        self.config_service = PointsConfigService(db, settings)

    def adjust_points(
        self,
        student_id: int,
        delta: int,
        note: str,
        actor_id: Optional[int] = None,
    ) -> PointsAdjustmentResponse:
        """Apply a teacher adjustment.

        Args:
            delta: points to add (positive) or deduct (negative), never zero
            note: why; stored on the ledger entry

        Raises:
            ValidationError: missing note or zero delta
            FeatureDisabledError: adjustments switched off for the church
            ExceedsMaxAdjustmentError: ``abs(delta)`` above the church cap
            InsufficientFundsError: deduction larger than the balance
        """
        note = (note or "").strip()
        if len(note) < MIN_NOTE_LENGTH:
            raise ValidationError(
                f"A note of at least {MIN_NOTE_LENGTH} characters is required"
            )
        if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
            raise ValidationError("Adjustment must be a non-zero whole number of points")

        student = self.student_repo.get_student(student_id)
        if student is None:
            raise NotFoundError(f"Student not found: {student_id}")

        config = self.config_service.get_config(student.church_id)
        if not config.is_teacher_adjustment_enabled:
            logger.warning(
                f"Adjustment for student {student_id} refused: disabled for church {student.church_id}"
            )
            raise FeatureDisabledError("Teacher points adjustment", church_id=student.church_id)

        if abs(delta) > config.max_teacher_adjustment:
            logger.warning(
                f"Adjustment {delta} for student {student_id} by {actor_id} exceeds cap {config.max_teacher_adjustment}"
            )
            raise ExceedsMaxAdjustmentError(
                delta=delta, max_adjustment=config.max_teacher_adjustment
            )

        try:
            entry, _ = self.wallet_repo.apply_transaction(
                student_id=student_id,
                currency=Currency.POINTS,
                delta=delta,
                reason=TransactionReason.TEACHER_ADJUSTMENT,
                reference_id=f"adj-{uuid.uuid4().hex}",
                actor_id=actor_id,
                note=note,
            )
        except InsufficientFundsError as e:
            self.db.rollback()
            logger.warning(f"Adjustment {delta} for student {student_id} refused: {e.message}")
            raise
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Teacher {actor_id} adjusted student {student_id} by {delta} points -> {entry.balance_after}"
        )
        return PointsAdjustmentResponse(
            transaction=entry, wallet=self.wallet_repo.get_wallet(student_id)
        )
