from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from sundaystore.models.points_config import ChurchPointsConfig as ChurchPointsConfigModel
from sundaystore.repositories.base import BaseRepository
from sundaystore.schemas.points import ChurchPointsConfigResponse


class PointsConfigRepository(
    BaseRepository[ChurchPointsConfigModel, ChurchPointsConfigResponse]
):
    """church_points_config rows"""

    def __init__(self, db: Session):
        super().__init__(ChurchPointsConfigModel, ChurchPointsConfigResponse, db)

    def get_by_church(self, church_id: int) -> Optional[ChurchPointsConfigResponse]:
        config = (
            self._query()
            .filter(ChurchPointsConfigModel.church_id == church_id)
            .first()
        )
        return self._to_schema(config)

    def upsert(
        self, church_id: int, values: Dict[str, Any], commit: bool = True
    ) -> ChurchPointsConfigResponse:
        """Insert or update the church's row"""
        config = (
            self.db.query(ChurchPointsConfigModel)
            .filter(ChurchPointsConfigModel.church_id == church_id)
            .first()
        )
        if config is None:
            config = ChurchPointsConfigModel(church_id=church_id, **values)
            self.db.add(config)
        else:
            for key, value in values.items():
                if hasattr(config, key):
                    setattr(config, key, value)

        self.db.flush()
        self.db.refresh(config)
        self._finish(commit)
        return self._to_schema(config)
