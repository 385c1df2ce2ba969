from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from household_ledger.app import create_app
from household_ledger.storage.memory import InMemoryLedgerStore


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    app = create_app(store=InMemoryLedgerStore())
    with TestClient(app) as test_client:
        yield test_client


def _purchase(**kwargs) -> dict:
    payload = {
        "date": "2025-01-15",
        "value": "100.00",
        "category": "Electronics",
        "description": "Headphones",
        "payment_method": "credit",
        "credit_card_ref": "visa-1",
    }
    payload.update(kwargs)
    return payload


def test_create_installment_purchase(client: TestClient) -> None:
    response = client.post("/api/transactions", json=_purchase(installments=3))
    assert response.status_code == 201
    data = response.json()

    assert [(tx["value"], tx["competency"], tx["installment_number"]) for tx in data] == [
        ("33.34", "01/2025", 1),
        ("33.33", "02/2025", 2),
        ("33.33", "03/2025", 3),
    ]
    group_id = data[0]["group_id"]

    response = client.get(f"/api/installments/{group_id}")
    assert response.status_code == 200
    assert [tx["id"] for tx in response.json()] == [tx["id"] for tx in data]


def test_credit_requires_card(client: TestClient) -> None:
    response = client.post("/api/transactions", json=_purchase(credit_card_ref=None))
    assert response.status_code == 422


def test_invalid_installment_count(client: TestClient) -> None:
    response = client.post("/api/transactions", json=_purchase(installments=0))
    assert response.status_code == 422
    assert response.json()["error"] == "invalid_installment_count"


def test_closed_month_is_distinguished_from_invalid_input(client: TestClient) -> None:
    assert client.post("/api/closed-months", json={"month": "01/2025"}).json() == ["01/2025"]

    response = client.post("/api/transactions", json=_purchase())
    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "month_closed"
    assert body["kind"] == "closed_month"
    assert client.get("/api/transactions").json() == []

    again = client.post("/api/closed-months", json={"month": "01/2025"})
    assert again.status_code == 409
    assert again.json()["error"] == "month_already_closed"


def test_delete_in_closed_month_keeps_transaction(client: TestClient) -> None:
    [tx] = client.post("/api/transactions", json=_purchase(date="2025-05-04")).json()
    client.post("/api/closed-months", json={"month": "05/2025"})

    response = client.delete(f"/api/transactions/{tx['id']}")
    assert response.status_code == 409
    assert client.get(f"/api/transactions/{tx['id']}").status_code == 200

    assert client.delete("/api/closed-months", params={"month": "05/2025"}).json() == []
    assert client.delete(f"/api/transactions/{tx['id']}").status_code == 204
    assert client.get(f"/api/transactions/{tx['id']}").status_code == 404


def test_replan_and_delete_group(client: TestClient) -> None:
    data = client.post("/api/transactions", json=_purchase(installments=2)).json()
    group_id = data[0]["group_id"]

    response = client.put(
        f"/api/installments/{group_id}",
        json={"new_total_value": "75.01", "new_purchase_date": "2025-12-01"},
    )
    assert response.status_code == 200
    replanned = response.json()
    assert [(tx["value"], tx["competency"]) for tx in replanned] == [
        ("37.51", "12/2025"),
        ("37.50", "01/2026"),
    ]

    response = client.delete(f"/api/installments/{group_id}")
    assert response.json() == {"group_id": group_id, "deleted": 2}
    assert client.get(f"/api/installments/{group_id}").status_code == 404


def test_single_installment_edit_rejected(client: TestClient) -> None:
    data = client.post("/api/transactions", json=_purchase(installments=2)).json()
    response = client.put(f"/api/transactions/{data[0]['id']}", json=_purchase(value="10.00"))
    assert response.status_code == 422
    assert response.json()["error"] == "grouped_transaction_edit"


def test_installment_preview(client: TestClient) -> None:
    response = client.get(
        "/api/installments/preview",
        params={"total_value": "100.00", "purchase_date": "2025-11-20", "installments": 3},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["competencies"] == ["11/2025", "12/2025", "01/2026"]
    assert data["values"] == ["33.34", "33.33", "33.33"]


def test_recurring_generation_flow(client: TestClient) -> None:
    response = client.post("/api/recurring-transactions", json={
        "description": "Rent",
        "value": "1500.00",
        "day_of_month": 31,
        "start_date": "2025-01-01",
        "payment_method": "pix",
    })
    assert response.status_code == 201
    template_id = response.json()["id"]

    first = client.post("/api/recurring-transactions/generate", params={"competency": "02/2025"}).json()
    assert [tx["date"] for tx in first["generated"]] == ["2025-02-28"]
    assert first["generated"][0]["source_template_id"] == template_id

    second = client.post("/api/recurring-transactions/generate", params={"competency": "02/2025"}).json()
    assert second["generated"] == []
    assert second["skipped"] == [template_id]
    assert len(client.get("/api/transactions", params={"competency": "02/2025"}).json()) == 1

    client.post("/api/closed-months", json={"month": "03/2025"})
    closed = client.post("/api/recurring-transactions/generate", params={"competency": "03/2025"})
    assert closed.status_code == 409


def test_template_window_validation(client: TestClient) -> None:
    response = client.post("/api/recurring-transactions", json={
        "value": "10.00",
        "start_date": "2025-05-01",
        "end_date": "2025-04-01",
    })
    assert response.status_code == 422


def test_malformed_competency(client: TestClient) -> None:
    response = client.post("/api/recurring-transactions/generate", params={"competency": "2025-02"})
    assert response.status_code == 422
    assert response.json()["error"] == "invalid_competency"
