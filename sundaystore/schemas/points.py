import enum
from typing import Optional

from pydantic import BaseModel, Field

from sundaystore.schemas.wallet import WalletResponse, WalletTransactionEntry


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    LATE = "late"
    EXCUSED = "excused"
    ABSENT = "absent"


class PointsAdjustmentRequest(BaseModel):
    """Teacher adjustment (positive adds, negative deducts)"""

    student_id: int = Field(..., gt=0, description="Student ID")
    delta: int = Field(..., description="Points to add (+) or deduct (-)")
    note: str = Field(..., max_length=500, description="Reason for the adjustment")


class PointsAdjustmentResponse(BaseModel):
    transaction: WalletTransactionEntry
    wallet: WalletResponse


class ChurchPointsConfigResponse(BaseModel):
    church_id: int
    attendance_points_present: int
    attendance_points_late: int
    attendance_points_excused: int
    attendance_points_absent: int
    trip_participation_points: int
    max_teacher_adjustment: int
    is_attendance_points_enabled: bool
    is_trip_points_enabled: bool
    is_teacher_adjustment_enabled: bool
    is_default: bool = Field(False, description="True when no row is stored for the church")

    class Config:
        from_attributes = True


class ChurchPointsConfigUpdateRequest(BaseModel):
    attendance_points_present: int = Field(..., ge=0)
    attendance_points_late: int = Field(..., ge=0)
    attendance_points_excused: int = Field(..., ge=0)
    attendance_points_absent: int = Field(..., ge=0)
    trip_participation_points: int = Field(..., ge=0)
    max_teacher_adjustment: int = Field(..., ge=0)
    is_attendance_points_enabled: bool = True
    is_trip_points_enabled: bool = True
    is_teacher_adjustment_enabled: bool = True


class AttendanceAwardRequest(BaseModel):
    student_id: int = Field(..., gt=0)
    attendance_id: str = Field(..., min_length=1, max_length=64)
    status: AttendanceStatus


class TripAwardRequest(BaseModel):
    student_id: int = Field(..., gt=0)
    trip_id: str = Field(..., min_length=1, max_length=64)


class PointsAwardResponse(BaseModel):
    awarded: bool = Field(..., description="False when the configured points are zero")
    transaction: Optional[WalletTransactionEntry] = None
    wallet: WalletResponse
