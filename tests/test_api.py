import json
from datetime import datetime, timezone

import pytest

from api.app import create_app

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def app(tmp_path):
    app = create_app(tmp_path / "data", clock=lambda: NOW)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def add_transaction(client, **overrides):
    payload = {
        "type": "expense",
        "amount": "300",
        "description": "Grocery Shopping",
        "categoryId": 4,
        "date": "2026-10-02",
    }
    payload.update(overrides)
    return client.post("/transactions", json=payload)


def test_create_and_list_transactions(client):
    response = add_transaction(client)

    assert response.status_code == 201
    assert response.get_json()["amount"] == "300.00"

    listing = client.get("/transactions", query_string={"type": "expense", "category": "4"})
    assert listing.status_code == 200
    [row] = listing.get_json()["items"]
    assert row["category"] == "Food & Dining"
    assert row["displayAmount"] == "-₹300.00"


def test_validation_error_returns_400_and_notifies(client):
    response = add_transaction(client, amount="0")

    assert response.status_code == 400
    assert response.get_json() == {"error": "Validation error", "details": "amount is required"}
    notifications = client.get("/notifications").get_json()["items"]
    assert notifications[-1]["kind"] == "error"


def test_non_json_body_rejected(client):
    response = client.post("/transactions", data="amount=5")

    assert response.status_code == 400


def test_dashboard_view(client):
    add_transaction(client, type="income", amount="1000", categoryId=1)
    add_transaction(client, amount="250")

    payload = client.get("/views/dashboard").get_json()

    assert payload["summary"]["balance"]["amount"] == "750.00"
    assert payload["summary"]["savingsRate"] == "75.0%"


def test_unknown_view_is_404(client):
    assert client.get("/views/reports").status_code == 404


def test_delete_requires_confirm_flag(client):
    txn_id = add_transaction(client).get_json()["id"]

    assert client.delete(f"/transactions/{txn_id}").status_code == 409
    assert len(client.get("/transactions").get_json()["items"]) == 1

    assert client.delete(f"/transactions/{txn_id}?confirm=true").status_code == 204
    assert client.get("/transactions").get_json()["items"] == []


def test_budget_upsert(client):
    client.post("/budgets", json={"categoryId": 4, "amount": "500"})
    client.post("/budgets", json={"categoryId": 4, "amount": "650", "period": "monthly"})

    items = client.get("/budgets").get_json()["items"]

    assert len(items) == 1
    assert items[0]["amount"] == "650.00"


def test_goal_progress(client):
    goal = client.post(
        "/goals",
        json={"title": "Emergency Fund", "targetAmount": "10000", "targetDate": "2027-10-19", "currentAmount": "2500"},
    ).get_json()

    response = client.post(f"/goals/{goal['id']}/progress", json={"amount": "100"})

    assert response.status_code == 200
    assert response.get_json()["currentAmount"] == "2600.00"
    assert client.post("/goals/1/progress", json={"amount": "100"}).status_code == 404


def test_category_delete_cascades(client):
    add_transaction(client)
    client.post("/budgets", json={"categoryId": 4, "amount": "500"})

    assert client.delete("/categories/4?confirm=1").status_code == 204

    assert client.get("/transactions").get_json()["items"] == []
    assert client.get("/budgets").get_json()["items"] == []
    names = [item["name"] for item in client.get("/categories").get_json()["items"]]
    assert "Food & Dining" not in names


def test_settings_update(client):
    response = client.put("/settings", json={"currency": "EUR"})

    assert response.get_json() == {"currency": "EUR", "dateFormat": "DD/MM/YYYY", "theme": "light"}
    assert client.get("/settings").get_json()["currency"] == "EUR"


def test_export_and_import(client, tmp_path):
    add_transaction(client)
    export = client.get("/export")

    assert export.status_code == 200
    assert "money-track-export-2026-10-19.json" in export.headers["Content-Disposition"]
    payload = export.get_json()
    assert payload["exportDate"] == "2026-10-19T12:00:00.000Z"

    other = create_app(tmp_path / "other", clock=lambda: NOW).test_client()
    response = other.post("/import", data=json.dumps(payload), content_type="application/json")

    assert response.status_code == 200
    assert response.get_json()["transactions"] == payload["transactions"]


def test_import_invalid_file(client):
    response = client.post("/import", data="{oops", content_type="application/json")

    assert response.status_code == 400
    assert response.get_json() == {"error": "Invalid file format"}


def test_clear_requires_confirm(client):
    add_transaction(client)

    assert client.post("/clear").status_code == 409
    assert client.post("/clear?confirm=yes").status_code == 204
    assert client.get("/categories").get_json()["items"] == []


def test_dismiss_notification(client):
    add_transaction(client)
    [item] = client.get("/notifications").get_json()["items"]

    assert client.delete(f"/notifications/{item['id']}").status_code == 204
    assert client.get("/notifications").get_json()["items"] == []


@pytest.mark.parametrize("months", ["0", "5000", "many"])
def test_analytics_month_count_is_bounded(client, months):
    response = client.get("/views/analytics", query_string={"months": months})

    assert response.status_code == 400
    assert response.get_json()["error"] == "Validation error"


def test_analytics_month_count(client):
    payload = client.get("/views/analytics?months=12").get_json()

    assert len(payload["trend"]["labels"]) == 12
