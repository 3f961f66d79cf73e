from sqlalchemy.orm import Session

from sundaystore.config import Settings, settings as default_settings
from sundaystore.repositories.points_config_repository import PointsConfigRepository
from sundaystore.schemas.points import (
    ChurchPointsConfigResponse,
    ChurchPointsConfigUpdateRequest,
)
import logging

logger = logging.getLogger(__name__)


class PointsConfigService:
    """Per-church points policy"""

    def __init__(self, db: Session, settings: Settings = default_settings):
        self.db = db
        self.settings = settings
        self.config_repo = PointsConfigRepository(db)

    def default_config(self, church_id: int) -> ChurchPointsConfigResponse:
        return ChurchPointsConfigResponse(
            church_id=church_id,
            attendance_points_present=self.settings.DEFAULT_ATTENDANCE_POINTS_PRESENT,
            attendance_points_late=self.settings.DEFAULT_ATTENDANCE_POINTS_LATE,
            attendance_points_excused=self.settings.DEFAULT_ATTENDANCE_POINTS_EXCUSED,
            attendance_points_absent=self.settings.DEFAULT_ATTENDANCE_POINTS_ABSENT,
            trip_participation_points=self.settings.DEFAULT_TRIP_PARTICIPATION_POINTS,
            max_teacher_adjustment=self.settings.DEFAULT_MAX_TEACHER_ADJUSTMENT,
            is_attendance_points_enabled=True,
            is_trip_points_enabled=True,
            is_teacher_adjustment_enabled=True,
            is_default=True,
        )

    def get_config(self, church_id: int) -> ChurchPointsConfigResponse:
        """Stored row, or the application defaults when the church has none"""
        config = self.config_repo.get_by_church(church_id)
        if config is None:
            return self.default_config(church_id)
        return config

    def upsert_config(
        self, church_id: int, request: ChurchPointsConfigUpdateRequest
    ) -> ChurchPointsConfigResponse:
        try:
            config = self.config_repo.upsert(church_id, request.model_dump())
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Points config for church {church_id} saved "
            f"(max adjustment {config.max_teacher_adjustment})"
        )
        return config
