from sqlalchemy import BigInteger, Boolean, Integer
from sqlalchemy.orm import Mapped, mapped_column

from sundaystore.models.base import BaseModel, BigIntegerPK


class ChurchPointsConfig(BaseModel):
    """Per-church points policy. Missing rows fall back to Settings defaults."""

    __tablename__ = "church_points_config"

    id: Mapped[int] = mapped_column(BigIntegerPK, primary_key=True, autoincrement=True)
    church_id: Mapped[int] = mapped_column(BigInteger, nullable=False, unique=True)

    attendance_points_present: Mapped[int] = mapped_column(Integer, nullable=False)
    attendance_points_late: Mapped[int] = mapped_column(Integer, nullable=False)
    attendance_points_excused: Mapped[int] = mapped_column(Integer, nullable=False)
    attendance_points_absent: Mapped[int] = mapped_column(Integer, nullable=False)
    trip_participation_points: Mapped[int] = mapped_column(Integer, nullable=False)

    max_teacher_adjustment: Mapped[int] = mapped_column(Integer, nullable=False)

    is_attendance_points_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    is_trip_points_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    is_teacher_adjustment_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
