import pytest

from sundaystore.core.exceptions import FeatureDisabledError, NotFoundError
from sundaystore.models.wallet import TransactionReason
from sundaystore.schemas.points import AttendanceStatus, ChurchPointsConfigUpdateRequest
from sundaystore.services.points_award_service import PointsAwardService
from sundaystore.services.points_config_service import PointsConfigService

TEACHER_ID = 900


@pytest.fixture
def award_service(db, settings):
    return PointsAwardService(db, settings)


def _save_config(db, settings, church_id, **overrides):
    values = dict(
        attendance_points_present=10,
        attendance_points_late=5,
        attendance_points_excused=0,
        attendance_points_absent=0,
        trip_participation_points=20,
        max_teacher_adjustment=50,
    )
    values.update(overrides)
    PointsConfigService(db, settings).upsert_config(
        church_id, ChurchPointsConfigUpdateRequest(**values)
    )


class TestAttendanceAward:
    @pytest.mark.parametrize(
        "status,points", [(AttendanceStatus.PRESENT, 10), (AttendanceStatus.LATE, 5)]
    )
    def test_default_points(self, award_service, make_student, status, points):
        student = make_student()

        result = award_service.award_attendance(student.id, "2026-10-18", status, TEACHER_ID)

        assert result.awarded is True
        assert result.wallet.points_balance == points
        assert result.transaction.reason == TransactionReason.ATTENDANCE_AWARD
        assert result.transaction.reference_id == "attendance:2026-10-18"

    def test_awarded_once_per_record(self, award_service, make_student):
        student = make_student()

        first = award_service.award_attendance(student.id, "55", AttendanceStatus.PRESENT)
        second = award_service.award_attendance(student.id, "55", AttendanceStatus.PRESENT)

        assert second.transaction.id == first.transaction.id
        assert second.wallet.points_balance == 10

    def test_rerun_after_config_change_keeps_original(
        self, db, settings, award_service, make_student
    ):
        student = make_student(church_id=4)
        first = award_service.award_attendance(student.id, "58", AttendanceStatus.PRESENT)
        _save_config(db, settings, 4, attendance_points_present=15)

        second = award_service.award_attendance(student.id, "58", AttendanceStatus.PRESENT)

        assert second.transaction.id == first.transaction.id
        assert second.wallet.points_balance == 10

    def test_zero_points_records_nothing(self, award_service, make_student):
        student = make_student()

        result = award_service.award_attendance(student.id, "56", AttendanceStatus.ABSENT)

        assert result.awarded is False
        assert result.transaction is None
        assert result.wallet.points_balance == 0

    def test_disabled(self, db, settings, award_service, make_student):
        student = make_student(church_id=9)
        _save_config(db, settings, 9, is_attendance_points_enabled=False)

        with pytest.raises(FeatureDisabledError):
            award_service.award_attendance(student.id, "57", AttendanceStatus.PRESENT)

    def test_unknown_student(self, award_service):
        with pytest.raises(NotFoundError):
            award_service.award_attendance(404, "1", AttendanceStatus.PRESENT)


class TestTripAward:
    def test_church_points(self, db, settings, award_service, make_student):
        student = make_student(church_id=2)
        _save_config(db, settings, 2, trip_participation_points=35)

        result = award_service.award_trip(student.id, "retreat-2026", TEACHER_ID)

        assert result.wallet.points_balance == 35
        assert result.transaction.reference_id == "trip:retreat-2026"
        assert result.transaction.reason == TransactionReason.TRIP_AWARD

    def test_disabled(self, db, settings, award_service, make_student):
        student = make_student(church_id=2)
        _save_config(db, settings, 2, is_trip_points_enabled=False)

        with pytest.raises(FeatureDisabledError):
            award_service.award_trip(student.id, "retreat-2026")
