CONFIG = {
    "attendance_points_present": 12,
    "attendance_points_late": 6,
    "attendance_points_excused": 0,
    "attendance_points_absent": 0,
    "trip_participation_points": 25,
    "max_teacher_adjustment": 50,
}


def test_adjust_within_cap(client, make_student, teacher_headers):
    student = make_student()

    response = client.post(
        "/api/v1/points/adjust",
        json={"student_id": student.id, "delta": 50, "note": "Led the prayer"},
        headers=teacher_headers,
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["wallet"]["points_balance"] == 50
    assert body["transaction"]["reason"] == "teacher_adjustment"


def test_adjust_over_cap(client, make_student, teacher_headers):
    student = make_student()

    response = client.post(
        "/api/v1/points/adjust",
        json={"student_id": student.id, "delta": 51, "note": "Led the prayer"},
        headers=teacher_headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "POINTS_001"
    wallet = client.get(f"/api/v1/wallets/{student.id}/transactions", headers=teacher_headers)
    assert wallet.json()["total_count"] == 0


def test_adjust_requires_note(client, make_student, teacher_headers):
    student = make_student()

    response = client.post(
        "/api/v1/points/adjust",
        json={"student_id": student.id, "delta": 5, "note": " "},
        headers=teacher_headers,
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_001"


def test_adjust_disabled(client, make_student, teacher_headers, admin_headers):
    student = make_student(church_id=5)
    client.put(
        "/api/v1/points/config/5",
        json={**CONFIG, "is_teacher_adjustment_enabled": False},
        headers=admin_headers,
    )

    response = client.post(
        "/api/v1/points/adjust",
        json={"student_id": student.id, "delta": 1, "note": "Any reason"},
        headers=teacher_headers,
    )

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "POINTS_002"


def test_config_requires_church_admin(client, teacher_headers, admin_headers):
    denied = client.put("/api/v1/points/config/2", json=CONFIG, headers=teacher_headers)
    assert denied.status_code == 403

    default = client.get("/api/v1/points/config/2", headers=teacher_headers)
    assert default.json()["is_default"] is True

    saved = client.put("/api/v1/points/config/2", json=CONFIG, headers=admin_headers)
    assert saved.status_code == 200
    assert saved.json()["attendance_points_present"] == 12

    stored = client.get("/api/v1/points/config/2", headers=teacher_headers)
    assert stored.json()["is_default"] is False


def test_awards(client, make_student, teacher_headers):
    student = make_student()

    attendance = client.post(
        "/api/v1/points/awards/attendance",
        json={"student_id": student.id, "attendance_id": "42", "status": "present"},
        headers=teacher_headers,
    )
    trip = client.post(
        "/api/v1/points/awards/trip",
        json={"student_id": student.id, "trip_id": "camp"},
        headers=teacher_headers,
    )

    assert attendance.json()["awarded"] is True
    assert trip.json()["wallet"]["points_balance"] == 30
