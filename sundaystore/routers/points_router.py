"""
Points API router

- POST /points/adjust: teacher adjustment, capped per church
- POST /points/awards/attendance, /points/awards/trip: event awards
- GET/PUT /points/config/{church_id}: church policy (church admins for PUT)
"""

from fastapi import APIRouter, Depends, Path

from sundaystore.core.auth_middleware import require_church_admin, require_manager
from sundaystore.deps import (
    get_points_adjustment_service,
    get_points_award_service,
    get_points_config_service,
)
from sundaystore.schemas.actor import Actor
from sundaystore.schemas.points import (
    AttendanceAwardRequest,
    ChurchPointsConfigResponse,
    ChurchPointsConfigUpdateRequest,
    PointsAdjustmentRequest,
    PointsAdjustmentResponse,
    PointsAwardResponse,
    TripAwardRequest,
)
from sundaystore.services.points_adjustment_service import PointsAdjustmentService
from sundaystore.services.points_award_service import PointsAwardService
from sundaystore.services.points_config_service import PointsConfigService

router = APIRouter(prefix="/points", tags=["points"])


@router.post("/adjust", response_model=PointsAdjustmentResponse)
def adjust_points(
    request: PointsAdjustmentRequest,
    actor: Actor = Depends(require_manager),
    adjustment_service: PointsAdjustmentService = Depends(get_points_adjustment_service),
) -> PointsAdjustmentResponse:
    """
    Add or deduct points by hand.

    HTTP Status:
        200: applied
        400: POINTS_001 over the cap, BALANCE_001 deduction larger than the balance
        403: POINTS_002 adjustments disabled for the church
        422: missing note or zero delta
    """
    return adjustment_service.adjust_points(
        student_id=request.student_id,
        delta=request.delta,
        note=request.note,
        actor_id=actor.id,
    )


@router.post("/awards/attendance", response_model=PointsAwardResponse)
def award_attendance(
    request: AttendanceAwardRequest,
    actor: Actor = Depends(require_manager),
    award_service: PointsAwardService = Depends(get_points_award_service),
) -> PointsAwardResponse:
    return award_service.award_attendance(
        student_id=request.student_id,
        attendance_id=request.attendance_id,
        status=request.status,
        actor_id=actor.id,
    )


@router.post("/awards/trip", response_model=PointsAwardResponse)
def award_trip(
    request: TripAwardRequest,
    actor: Actor = Depends(require_manager),
    award_service: PointsAwardService = Depends(get_points_award_service),
) -> PointsAwardResponse:
    return award_service.award_trip(
        student_id=request.student_id, trip_id=request.trip_id, actor_id=actor.id
    )


@router.get("/config/{church_id}", response_model=ChurchPointsConfigResponse)
def get_points_config(
    church_id: int = Path(..., gt=0),
    actor: Actor = Depends(require_manager),
    config_service: PointsConfigService = Depends(get_points_config_service),
) -> ChurchPointsConfigResponse:
    return config_service.get_config(church_id)


@router.put("/config/{church_id}", response_model=ChurchPointsConfigResponse)
def update_points_config(
    request: ChurchPointsConfigUpdateRequest,
    church_id: int = Path(..., gt=0),
    actor: Actor = Depends(require_church_admin),
    config_service: PointsConfigService = Depends(get_points_config_service),
) -> ChurchPointsConfigResponse:
    return config_service.upsert_config(church_id, request)
