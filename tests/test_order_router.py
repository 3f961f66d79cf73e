import pytest


@pytest.fixture
def shop(make_student, make_item):
    student = make_student(full_name="Mina", points=200)
    item = make_item(price_points=80, stock_quantity=3, requires_approval=True)
    return student, item


def _place(client, student, item, headers):
    response = client.post(
        "/api/v1/orders",
        json={"student_id": student.id, "store_item_id": item.id, "quantity": 1},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_full_lifecycle(client, shop, teacher_headers, student_headers):
    student, item = shop
    order = _place(client, student, item, student_headers(student.id))
    assert order["status"] == "pending"
    assert order["total_points"] == 80

    for action, status in [("approve", "approved"), ("mark_purchased", "purchased")]:
        response = client.post(
            f"/api/v1/orders/{order['id']}/{action}", headers=teacher_headers
        )
        assert response.status_code == 200, response.text
        assert response.json()["order"]["status"] == status

    body = response.json()
    assert body["transaction_id"] is not None
    assert body["wallet"]["points_balance"] == 120

    item_response = client.get(f"/api/v1/store/items/{item.id}", headers=teacher_headers)
    assert item_response.json()["stock_quantity"] == 2

    for action, status in [("mark_ready", "ready"), ("collect", "collected")]:
        response = client.post(
            f"/api/v1/orders/{order['id']}/{action}",
            json={"admin_notes": f"{action} done"},
            headers=teacher_headers,
        )
        assert response.json()["order"]["status"] == status

    assert response.json()["order"]["admin_notes"] == "collect done"


def test_invalid_transition_is_conflict(client, shop, teacher_headers, student_headers):
    student, item = shop
    order = _place(client, student, item, student_headers(student.id))

    response = client.post(f"/api/v1/orders/{order['id']}/collect", headers=teacher_headers)

    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "ORDER_001"
    assert body["error"]["details"]["current_status"] == "pending"


def test_insufficient_funds_keeps_order_approved(
    client, make_student, make_item, teacher_headers
):
    student = make_student(points=50)
    item = make_item(price_points=80, requires_approval=False)
    order = _place(client, student, item, teacher_headers)
    assert order["status"] == "approved"

    response = client.post(
        f"/api/v1/orders/{order['id']}/mark_purchased", headers=teacher_headers
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "BALANCE_001"
    fetched = client.get(f"/api/v1/orders/{order['id']}", headers=teacher_headers)
    assert fetched.json()["status"] == "approved"


def test_out_of_stock_is_conflict(client, make_student, make_item, teacher_headers):
    student = make_student(points=500)
    item = make_item(price_points=80, stock_quantity=1, requires_approval=False)
    order = client.post(
        "/api/v1/orders",
        json={"student_id": student.id, "store_item_id": item.id, "quantity": 2},
        headers=teacher_headers,
    ).json()

    response = client.post(
        f"/api/v1/orders/{order['id']}/mark_purchased", headers=teacher_headers
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "STOCK_001"


def test_student_can_cancel_own_order_only(client, shop, make_student, student_headers):
    student, item = shop
    other = make_student(full_name="Other")
    order = _place(client, student, item, student_headers(student.id))

    forbidden = client.post(
        f"/api/v1/orders/{order['id']}/cancel", headers=student_headers(other.id)
    )
    assert forbidden.status_code == 403

    approve = client.post(
        f"/api/v1/orders/{order['id']}/approve", headers=student_headers(student.id)
    )
    assert approve.status_code == 403
    assert approve.json()["error"]["code"] == "AUTH_002"

    cancelled = client.post(
        f"/api/v1/orders/{order['id']}/cancel", headers=student_headers(student.id)
    )
    assert cancelled.status_code == 200
    assert cancelled.json()["order"]["status"] == "cancelled"


def test_student_cannot_order_for_someone_else(client, shop, make_student, student_headers):
    student, item = shop
    other = make_student(full_name="Other")

    response = client.post(
        "/api/v1/orders",
        json={"student_id": student.id, "store_item_id": item.id},
        headers=student_headers(other.id),
    )

    assert response.status_code == 403


def test_multi_item_order(client, make_student, make_item, teacher_headers):
    student = make_student(points=500)
    first = make_item(name="Bible", price_points=80)
    second = make_item(name="Coloring Book", price_points=30)

    response = client.post(
        "/api/v1/orders/multi",
        json={
            "student_id": student.id,
            "items": [
                {"store_item_id": first.id, "quantity": 1},
                {"store_item_id": second.id, "quantity": 2},
            ],
        },
        headers=teacher_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["total_points"] == 140
    assert len(body["items"]) == 2


def test_students_list_only_their_orders(client, shop, make_student, student_headers, teacher_headers):
    student, item = shop
    other = make_student(full_name="Other")
    _place(client, student, item, student_headers(student.id))
    _place(client, other, item, student_headers(other.id))

    own = client.get("/api/v1/orders", headers=student_headers(student.id)).json()
    everyone = client.get("/api/v1/orders", headers=teacher_headers).json()

    assert own["total_count"] == 1
    assert own["orders"][0]["student_id"] == student.id
    assert everyone["total_count"] == 2


def test_unknown_action_and_missing_headers(client, shop, teacher_headers, student_headers):
    student, item = shop
    order = _place(client, student, item, student_headers(student.id))

    unknown = client.post(f"/api/v1/orders/{order['id']}/refund", headers=teacher_headers)
    assert unknown.status_code == 422
    assert unknown.json()["error"]["code"] == "VALIDATION_001"

    anonymous = client.get(f"/api/v1/orders/{order['id']}")
    assert anonymous.status_code == 401
    assert anonymous.json()["error"]["code"] == "AUTH_001"
