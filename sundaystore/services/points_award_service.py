from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from sundaystore.config import Settings, settings as default_settings
from sundaystore.core.exceptions import FeatureDisabledError, NotFoundError
from sundaystore.models.wallet import Currency, TransactionReason
from sundaystore.repositories.student_repository import StudentRepository
from sundaystore.repositories.wallet_repository import WalletRepository
from sundaystore.schemas.points import AttendanceStatus, PointsAwardResponse
from sundaystore.schemas.wallet import WalletResponse
from sundaystore.services.points_config_service import PointsConfigService
import logging

logger = logging.getLogger(__name__)


class PointsAwardService:
    """Attendance and trip points, credited once per event"""

    def __init__(self, db: Session, settings: Settings = default_settings):
        self.db = db
        self.settings = settings
        self.wallet_repo = WalletRepository(db)
        self.student_repo = StudentRepository(db)
        self.config_service = PointsConfigService(db, settings)

    def _wallet(self, student_id: int) -> WalletResponse:
        wallet = self.wallet_repo.get_wallet(student_id)
        if wallet is None:
            return WalletResponse(
                student_id=student_id, points_balance=0, cash_balance=Decimal("0")
            )
        return wallet

    def _award(
        self,
        student_id: int,
        points: int,
        reason: TransactionReason,
        reference_id: str,
        actor_id: Optional[int],
    ) -> PointsAwardResponse:
        if points <= 0:
            logger.info(f"No points configured for {reference_id}; student {student_id} skipped")
            return PointsAwardResponse(awarded=False, wallet=self._wallet(student_id))

        # already awarded events keep their original amount even if the config changed
        existing = self.wallet_repo.find_transaction(student_id, reason, reference_id)
        if existing:
            return PointsAwardResponse(
                awarded=True, transaction=existing, wallet=self._wallet(student_id)
            )

        try:
            entry, replayed = self.wallet_repo.apply_transaction(
                student_id=student_id,
                currency=Currency.POINTS,
                delta=points,
                reason=reason,
                reference_id=reference_id,
                actor_id=actor_id,
            )
        except Exception:
            self.db.rollback()
            raise

        if not replayed:
            logger.info(f"Awarded {points} points to student {student_id} for {reference_id}")
        return PointsAwardResponse(
            awarded=True, transaction=entry, wallet=self._wallet(student_id)
        )

    def award_attendance(
        self,
        student_id: int,
        attendance_id: str,
        status: AttendanceStatus,
        actor_id: Optional[int] = None,
    ) -> PointsAwardResponse:
        """Credit the church's points for an attendance record; once per record"""
        student = self.student_repo.get_student(student_id)
        if student is None:
            raise NotFoundError(f"Student not found: {student_id}")

        config = self.config_service.get_config(student.church_id)
        if not config.is_attendance_points_enabled:
            raise FeatureDisabledError("Attendance points", church_id=student.church_id)

        points = {
            AttendanceStatus.PRESENT: config.attendance_points_present,
            AttendanceStatus.LATE: config.attendance_points_late,
            AttendanceStatus.EXCUSED: config.attendance_points_excused,
            AttendanceStatus.ABSENT: config.attendance_points_absent,
        }[status]

        return self._award(
            student_id,
            points,
            TransactionReason.ATTENDANCE_AWARD,
            f"attendance:{attendance_id}",
            actor_id,
        )

    def award_trip(
        self, student_id: int, trip_id: str, actor_id: Optional[int] = None
    ) -> PointsAwardResponse:
        student = self.student_repo.get_student(student_id)
        if student is None:
            raise NotFoundError(f"Student not found: {student_id}")

        config = self.config_service.get_config(student.church_id)
        if not config.is_trip_points_enabled:
            raise FeatureDisabledError("Trip points", church_id=student.church_id)

        return self._award(
            student_id,
            config.trip_participation_points,
            TransactionReason.TRIP_AWARD,
            f"trip:{trip_id}",
            actor_id,
        )
