"""Tests for the Flask API."""

import pytest

from api.app import create_app
from ledger.codec import BUDGETS_FILE


@pytest.fixture
def client(data_dir):
    app = create_app(data_dir)
    app.config["TESTING"] = True
    return app.test_client()


def test_default_account_listed(client):
    response = client.get("/accounts")

    assert response.status_code == 200
    assert response.get_json() == {
        "items": [{"id": 1, "name": "Default Account", "balance": "0.00", "transaction_ids": []}]
    }


def test_create_transaction_and_summary(client):
    client.post("/budgets", json={"category": "food", "limit": "100"})
    response = client.post("/transactions", json={
        "account_id": 1,
        "description": "Coffee",
        "amount": "4.50",
        "category": "Food",
        "date": "2024-01-05",
        "kind": "Expense",
    })

    assert response.status_code == 201
    assert response.get_json()["id"] == 1

    summary = client.get("/summary").get_json()
    assert summary["balance"] == "-4.50"
    assert summary["category_spending"] == {"Food": "4.50"}
    assert summary["report"] == {"total_income": "0.00", "total_expense": "4.50", "net": "-4.50"}

    budgets = client.get("/budgets").get_json()["items"]
    assert budgets[0]["current_spending"] == "4.50"


def test_transactions_newest_first(client):
    for day in ("2024-01-01", "2024-03-01"):
        client.post("/transactions", json={
            "account_id": 1, "description": "x", "amount": "1", "category": "c",
            "date": day, "kind": "Income",
        })

    items = client.get("/transactions").get_json()["items"]

    assert [item["date"] for item in items] == ["2024-03-01", "2024-01-01"]


def test_unknown_account_returns_404(client):
    response = client.post("/transactions", json={
        "account_id": 3, "description": "x", "amount": "1", "category": "c",
        "date": "2024-01-01", "kind": "Income",
    })
    assert response.status_code == 404
    assert client.get("/accounts/3").status_code == 404


def test_validation_error_returns_400(client):
    response = client.post("/budgets", json={"category": "a,b", "limit": "10"})

    assert response.status_code == 400
    assert response.get_json()["error"] == "Validation error"


def test_save_writes_files(client, data_dir):
    client.post("/budgets", json={"category": "rent", "limit": "900"})

    response = client.post("/save")

    assert response.status_code == 200
    assert (data_dir / BUDGETS_FILE).read_text() == "rent,900.00,0.00\n"


def test_account_detail_includes_transactions(client):
    client.post("/transactions", json={
        "account_id": 1, "description": "Pay", "amount": "10", "category": "Work",
        "date": "2024-01-01", "kind": "income",
    })

    payload = client.get("/accounts/1").get_json()

    assert payload["balance"] == "10.00"
    assert payload["transactions"][0]["description"] == "Pay"
