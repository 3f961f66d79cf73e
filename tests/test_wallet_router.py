def test_get_wallet(client, make_student, student_headers):
    student = make_student(points=25)

    response = client.get(f"/api/v1/wallets/{student.id}", headers=student_headers(student.id))

    assert response.status_code == 200
    assert response.json()["points_balance"] == 25


def test_student_cannot_read_other_wallet(client, make_student, student_headers):
    student = make_student()
    other = make_student(full_name="Other")

    response = client.get(f"/api/v1/wallets/{student.id}", headers=student_headers(other.id))

    assert response.status_code == 403


def test_credit_and_debit(client, make_student, teacher_headers):
    student = make_student()

    credit = client.post(
        f"/api/v1/wallets/{student.id}/credit",
        json={"amount": "30", "reason": "attendance_award", "reference_id": "attendance:1"},
        headers=teacher_headers,
    )
    assert credit.status_code == 200, credit.text
    assert credit.json()["wallet"]["points_balance"] == 30
    assert credit.json()["transaction"]["actor_id"] == 900

    replay = client.post(
        f"/api/v1/wallets/{student.id}/credit",
        json={"amount": "30", "reason": "attendance_award", "reference_id": "attendance:1"},
        headers=teacher_headers,
    )
    assert replay.json()["replayed"] is True
    assert replay.json()["wallet"]["points_balance"] == 30

    overdraw = client.post(
        f"/api/v1/wallets/{student.id}/debit",
        json={"amount": "31", "reason": "teacher_adjustment"},
        headers=teacher_headers,
    )
    assert overdraw.status_code == 400
    assert overdraw.json()["error"]["code"] == "BALANCE_001"


def test_order_reasons_are_reserved(client, make_student, teacher_headers):
    student = make_student(points=200)

    for path, reason in [("debit", "order_purchase"), ("credit", "order_refund")]:
        response = client.post(
            f"/api/v1/wallets/{student.id}/{path}",
            json={"amount": "1", "reason": reason, "reference_id": "1"},
            headers=teacher_headers,
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_001"

    ledger = client.get(f"/api/v1/wallets/{student.id}/transactions", headers=teacher_headers)
    assert ledger.json()["total_count"] == 1


def test_reused_reference_with_other_amount(client, make_student, teacher_headers):
    student = make_student()
    client.post(
        f"/api/v1/wallets/{student.id}/credit",
        json={"amount": "50", "reason": "teacher_adjustment", "reference_id": "r1"},
        headers=teacher_headers,
    )

    response = client.post(
        f"/api/v1/wallets/{student.id}/debit",
        json={"amount": "30", "reason": "teacher_adjustment", "reference_id": "r1"},
        headers=teacher_headers,
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "LEDGER_001"
    wallet = client.get(f"/api/v1/wallets/{student.id}", headers=teacher_headers)
    assert wallet.json()["points_balance"] == 50


def test_students_cannot_credit(client, make_student, student_headers):
    student = make_student()

    response = client.post(
        f"/api/v1/wallets/{student.id}/credit",
        json={"amount": "30", "reason": "teacher_adjustment"},
        headers=student_headers(student.id),
    )

    assert response.status_code == 403


def test_fractional_points_rejected(client, make_student, teacher_headers):
    student = make_student()

    response = client.post(
        f"/api/v1/wallets/{student.id}/credit",
        json={"amount": "1.5", "reason": "teacher_adjustment"},
        headers=teacher_headers,
    )

    assert response.status_code == 422


def test_transactions_and_integrity(client, make_student, teacher_headers):
    student = make_student(points=40)

    ledger = client.get(
        f"/api/v1/wallets/{student.id}/transactions?limit=10", headers=teacher_headers
    )
    integrity = client.get(f"/api/v1/wallets/{student.id}/integrity", headers=teacher_headers)

    assert ledger.json()["total_count"] == 1
    assert ledger.json()["entries"][0]["reason"] == "teacher_adjustment"
    assert integrity.json()["status"] == "OK"


def test_unknown_student(client, teacher_headers):
    response = client.get("/api/v1/wallets/9999", headers=teacher_headers)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND_001"


def test_health(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "ok"}
