import pytest

from fees import compute_fee_status, summarize_fees


@pytest.mark.parametrize(
    "amount, paid, expected",
    [
        (100, 100, (0, "paid")),
        (100, 50, (50, "partial")),
        (100, 0, (100, "unpaid")),
        (100, 150, (-50, "paid")),
        (0, 0, (0, "unpaid")),
        (250.5, 0.5, (250.0, "partial")),
    ],
)
def test_compute_fee_status(amount, paid, expected):
    assert compute_fee_status(amount, paid) == expected


def test_summarize_fees_counts_each_status():
    fees = [
        {"amount": 100, "amountPaid": 100, "status": "paid"},
        {"amount": 200, "amountPaid": 50, "status": "partial"},
        {"amount": 300, "amountPaid": 0, "status": "unpaid"},
        {"amount": 50, "amountPaid": 0, "status": "unpaid"},
    ]
    assert summarize_fees(fees) == {
        "totalAmount": 650,
        "totalPaid": 150,
        "totalPending": 500,
        "paidCount": 1,
        "partialCount": 1,
        "unpaidCount": 2,
    }


def test_summarize_fees_empty():
    summary = summarize_fees([])
    assert summary["totalAmount"] == 0
    assert summary["totalPending"] == 0
    assert summary["unpaidCount"] == 0


def test_create_fee_computes_balance_and_status(seed, client):
    school = seed.school()
    student = seed.student(school["class"]["_id"], 1001)

    response = client.post("/api/fees", json={
        "studentId": student["_id"],
        "financeType": "tuition",
        "amount": 100,
        "amountPaid": 40,
    })

    assert response.status_code == 201
    fee = response.json()
    assert fee["balance"] == 60
    assert fee["status"] == "partial"
    assert fee["studentId"]["name"] == "Student 1001"


def test_update_fee_recomputes_from_stored_amount(seed, client):
    school = seed.school()
    student = seed.student(school["class"]["_id"], 1001)
    fee = seed.post("/api/fees", {
        "studentId": student["_id"],
        "financeType": "library",
        "amount": 80,
        "amountPaid": 0,
    })
    assert fee["status"] == "unpaid"

    response = client.put(f"/api/fees/{fee['_id']}", json={"amountPaid": 80})

    assert response.status_code == 200
    assert response.json()["balance"] == 0
    assert response.json()["status"] == "paid"


def test_update_fee_without_amounts_keeps_status(seed, client):
    school = seed.school()
    student = seed.student(school["class"]["_id"], 1001)
    fee = seed.post("/api/fees", {
        "studentId": student["_id"],
        "financeType": "other",
        "amount": 80,
        "amountPaid": 20,
    })

    response = client.put(f"/api/fees/{fee['_id']}", json={"description": "bus pass"})

    assert response.status_code == 200
    assert response.json()["status"] == "partial"
    assert response.json()["description"] == "bus pass"


def test_create_fee_rejects_negative_amount(seed, client):
    school = seed.school()
    student = seed.student(school["class"]["_id"], 1001)

    response = client.post("/api/fees", json={
        "studentId": student["_id"],
        "financeType": "tuition",
        "amount": -5,
        "amountPaid": 0,
    })

    assert response.status_code == 400
    assert "amount" in response.json()["error"]


def test_create_fee_for_unknown_student(client):
    response = client.post("/api/fees", json={
        "studentId": "64b7f0c2a1b2c3d4e5f60718",
        "financeType": "tuition",
        "amount": 10,
        "amountPaid": 0,
    })

    assert response.status_code == 404
    assert response.json() == {"error": "Student not found"}
