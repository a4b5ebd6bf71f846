from grocery_pricing.api import prices as prices_api
from grocery_pricing.storage.models import Recipe
from grocery_pricing.storage.repositories import seed_sample_data


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_preview_with_sample_data(client):
    response = client.post("/api/prices/preview")
    assert response.status_code == 200
    results = response.json()
    assert [r["recipe_id"] for r in results] == ["rec_pate_chinois", "rec_paella"]
    assert results[0]["total_price"] == 6.43
    assert results[1]["total_price"] == 0.0
    assert results[1]["ingredients"][0]["error"] == "No price available in the selected stores"


def test_preview_with_request_data(client):
    payload = {
        "recipes": [
            {"id": "r1", "name": "Purée", "ingredients": [{"ingredient_id": "x", "quantity": 2, "unit": "kg"}]}
        ],
        "prices": [{"store_id": "s1", "ingredient_id": "x", "price": 3.0, "quantity": 500, "unit": "g"}],
        "allowed_store_ids": ["s1"],
    }
    response = client.post("/api/prices/preview", json=payload)
    assert response.status_code == 200
    [result] = response.json()
    assert result["total_price"] == 12.0
    assert result["ingredients"][0]["best_deal"]["store_id"] == "s1"


def test_calculate_prices(client, session):
    seed_sample_data(session)
    response = client.post("/api/prices/calculate")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["recipes_processed"] == 2
    assert data["stores_processed"] == 4
    assert data["pairs_processed"] == 8
    assert data["errors"] == []
    session.expire_all()
    assert session.get(Recipe, "rec_pate_chinois").estimated_price == 6.75


def test_calculate_rejected_while_running(client):
    prices_api.run_lock.try_start()
    response = client.post("/api/prices/calculate")
    assert response.status_code == 409
    data = response.json()
    assert data["success"] is False
    assert data["errors"] == ["Calculation already in progress"]


def test_status_and_reset_lock(client):
    response = client.get("/api/prices/status")
    assert response.json()["state"] == "idle"

    prices_api.run_lock.try_start()
    response = client.get("/api/prices/status")
    assert response.json()["is_calculating"] is True

    response = client.post("/api/prices/reset-lock")
    assert response.status_code == 200
    assert response.json() == {"was_running": True, "state": "idle"}
    assert client.get("/api/prices/status").json()["is_calculating"] is False


def test_calculate_async_enqueues_task(client, monkeypatch):
    class FakeResult:
        id = "task-123"

    class FakeTask:
        def delay(self):
            return FakeResult()

    monkeypatch.setattr(prices_api, "calculate_recipe_prices", FakeTask())
    response = client.post("/api/prices/calculate/async")
    assert response.status_code == 202
    assert response.json() == {"task_id": "task-123", "status": "queued"}
