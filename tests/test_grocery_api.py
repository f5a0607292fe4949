from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from grocerygen.infra.grocery_store import GroceryPersistenceError
from grocerygen.infra.redis_client import get_sync_redis
from grocerygen.routers.ready import check_db
from grocerygen.settings import settings


@pytest.fixture
def plan(make_recipe, make_plan):
    chili = make_recipe("Turkey Chili", [
        ("1", "lb", "ground turkey"),
        ("2", "cans", "black beans"),
        ("1", "tsp", "cumin"),
        ("1", "pinch", "cayenne"),
    ])
    bowl = make_recipe("Burrito Bowl", [
        ("1/2", "lb", "Ground Turkey"),
        ("1", "can", "black bean"),
        ("2", "", "limes"),
    ])
    return make_plan("Lean Bulk", days=[[chili, bowl], [bowl]])


def assign(client, plan_id, customer_id="customer-1", **extra):
    return client.post("/api/grocery/assignments", json={"plan_id": plan_id, "customer_id": customer_id, **extra})


def test_assignment_creates_list(client, plan):
    response = assign(client, plan.id)
    assert response.status_code == 200
    data = response.json()

    assert data["action"] == "created"
    assert data["item_count"] == 3
    assert data["residual_count"] == 3

    grocery_list = data["list"]
    assert grocery_list["name"] == "Grocery List - Lean Bulk"
    assert grocery_list["revision"] == 1

    turkey = next(i for i in grocery_list["items"] if i["key"] == "ground turkey")
    assert turkey["unit"] == "g"
    assert turkey["quantity"] == pytest.approx(2 * 453.592)
    assert turkey["category"] == "meat"
    assert turkey["notes"] == "Used in: Turkey Chili, Burrito Bowl"

    beans = next(i for i in grocery_list["items"] if i["key"] == "black bean")
    assert beans["unit"] == "piece"
    assert beans["quantity"] == 4.0

    assert {r["key"] for r in grocery_list["residuals"]} == {"cayenne", "lime"}


def test_repeat_assignment_is_idempotent(client, plan):
    first = assign(client, plan.id).json()
    second = assign(client, plan.id).json()

    assert second["action"] == "updated"
    assert second["list"]["id"] == first["list"]["id"]
    assert second["list"]["revision"] == 2
    assert [(i["key"], i["quantity"]) for i in second["list"]["items"]] == [
        (i["key"], i["quantity"]) for i in first["list"]["items"]
    ]


def test_get_grocery_list(client, plan):
    assert client.get(f"/api/grocery/lists/{plan.id}/customer-1").status_code == 404

    assign(client, plan.id)
    response = client.get(f"/api/grocery/lists/{plan.id}/customer-1")

    assert response.status_code == 200
    assert response.json()["customer_id"] == "customer-1"
    assert len(response.json()["items"]) == 3


def test_toggle_off_via_flags_endpoint(client, plan):
    response = client.put("/api/flags/auto_generate_grocery_lists", json={"enabled": False})
    assert response.status_code == 200
    assert response.json() == {"name": "auto_generate_grocery_lists", "enabled": False}

    data = assign(client, plan.id).json()

    assert data["action"] == "skipped"
    assert data["reason"] == "Auto-generation is disabled"
    assert data["list"] is None
    assert client.get(f"/api/grocery/lists/{plan.id}/customer-1").status_code == 404


def test_list_flags(client):
    response = client.get("/api/flags")

    assert response.status_code == 200
    assert {f["name"]: f["enabled"] for f in response.json()} == {
        "auto_generate_grocery_lists": True,
        "update_existing_lists": True,
    }


def test_unknown_flag_is_404(client):
    assert client.put("/api/flags/launch_rockets", json={"enabled": True}).status_code == 404


def test_missing_plan_is_skipped(client):
    data = assign(client, "no-such-plan").json()
    assert data["action"] == "skipped"
    assert data["reason"] == "Meal plan not found"


def test_preview(client, plan):
    response = client.get(f"/api/grocery/plans/{plan.id}/preview")

    assert response.status_code == 200
    data = response.json()
    assert data["ingredient_count"] == 10
    assert data["recipe_count"] == 2
    assert [i["key"] for i in data["items"]] == ["ground turkey", "black bean", "cumin"]
    # Nothing saved
    assert client.get(f"/api/grocery/lists/{plan.id}/customer-1").status_code == 404

    assert client.get("/api/grocery/plans/no-such-plan/preview").status_code == 404


def test_delete_plan_removes_lists(client, plan):
    assign(client, plan.id, "customer-1")
    assign(client, plan.id, "customer-2")

    response = client.delete(f"/api/plans/{plan.id}")
    assert response.status_code == 204

    assert client.get(f"/api/grocery/lists/{plan.id}/customer-1").status_code == 404
    assert client.get(f"/api/grocery/lists/{plan.id}/customer-2").status_code == 404
    assert client.delete(f"/api/plans/{plan.id}").status_code == 404


def test_deferred_assignment_is_queued(client, plan):
    response = assign(client, plan.id, defer=True)

    assert response.status_code == 202
    assert response.json()["action"] == "queued"
    assert get_sync_redis().llen(settings.assignment_queue_key) == 1


def test_persistence_failure_returns_503(client, plan):
    with patch(
        "grocerygen.infra.grocery_store.SqlGroceryListGateway.upsert_grocery_list",
        side_effect=GroceryPersistenceError("database is locked"),
    ):
        response = assign(client, plan.id)

    assert response.status_code == 503
    assert "database is locked" in response.json()["detail"]


def test_ready(client):
    response = client.get("/api/ready")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "redis_ok": True, "db_ok": True}


def test_check_db_reports_failure():
    db = MagicMock()
    db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))

    assert check_db(db) is False
