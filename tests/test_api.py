from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from duckwheel.api import create_app
from duckwheel.testing import app_fixture

SEED_FILE = Path(__file__).resolve().parents[1] / "examples" / "seed.json"
SECRET = "s3cret"


@pytest.fixture()
def client():
    with TestClient(create_app(app_fixture(auth_secret=SECRET), seed_file=SEED_FILE)) as client:
        yield client


@pytest.fixture()
def open_client():
    with TestClient(create_app(app_fixture(), seed_file=SEED_FILE)) as client:
        yield client


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_me(client):
    response = client.get("/api/me", params={"userId": "duck-alex"})
    assert response.status_code == 200
    assert response.json()["user"]["balance"] == 80
    assert client.get("/api/me").json() == {"error": "USER_ID_REQUIRED"}
    missing = client.get("/api/me", params={"userId": "ghost"})
    assert missing.status_code == 404
    assert missing.json() == {"error": "USER_NOT_FOUND"}


def test_spin_updates_balance_and_logs(client):
    response = client.post("/api/spin", json={"userId": "duck-alex", "betLevel": "basic", "seed": "api"})
    assert response.status_code == 200
    body = response.json()
    assert body["result"]["balanceBefore"] == 80
    assert body["result"]["balanceAfter"] == 77
    assert body["user"]["balance"] == 77
    assert body["user"]["spinsTotal"] == 4
    logs = client.get("/api/logs", params={"userId": "duck-alex"}).json()["logs"]
    assert len(logs) == 1
    assert logs[0]["prizeId"] == body["result"]["prize"]["prizeId"]


@pytest.mark.parametrize(
    "payload, status, code",
    [
        ({"userId": "duck-alex", "betLevel": "mega"}, 400, "LEVEL_NOT_FOUND"),
        ({"userId": "ghost", "betLevel": "basic"}, 404, "USER_NOT_FOUND"),
        ({"betLevel": "basic"}, 400, "INVALID_INPUT"),
    ],
)
def test_spin_errors(client, payload, status, code):
    response = client.post("/api/spin", json=payload)
    assert response.status_code == status
    assert response.json() == {"error": code}


def test_buy(client):
    refused = client.post("/api/buy", json={"userId": "duck-alex", "prizeId": "prize-coffee"})
    assert refused.status_code == 400
    assert refused.json() == {"error": "DIRECT_PURCHASE_NOT_ALLOWED"}

    bought = client.post("/api/buy", json={"userId": "duck-maria", "prizeId": "prize-merch"})
    assert bought.status_code == 200
    assert bought.json()["order"]["price"] == 45
    assert bought.json()["order"]["status"] == "created"
    assert bought.json()["user"]["balance"] == 0

    broke = client.post("/api/buy", json={"userId": "duck-maria", "prizeId": "prize-stickers"})
    assert broke.json() == {"error": "INSUFFICIENT_BALANCE"}
    unknown = client.post("/api/buy", json={"userId": "duck-maria", "prizeId": "prize-yacht"})
    assert unknown.status_code == 404

    orders = client.get("/api/orders", params={"userId": "duck-maria"}).json()["orders"]
    assert [order["prizeId"] for order in orders] == ["prize-merch"]


def test_admin_gate(client):
    payload = {"userId": "duck-alex", "amount": 10, "note": "доклад"}
    assert client.post("/api/admin/add-ducks", json=payload).status_code == 401
    wrong = client.post("/api/admin/add-ducks", json=payload, headers={"X-Auth-Secret": "nope"})
    assert wrong.json() == {"error": "UNAUTHORIZED"}

    by_header = client.post("/api/admin/add-ducks", json=payload, headers={"X-Auth-Secret": SECRET})
    assert by_header.status_code == 200
    assert by_header.json()["user"]["balance"] == 90
    by_body = client.post("/api/admin/add-ducks", json={**payload, "authSecret": SECRET})
    assert by_body.json()["user"]["balance"] == 100
    by_query = client.post("/api/admin/add-ducks", json=payload, params={"authSecret": SECRET})
    assert by_query.json()["user"]["balance"] == 110

    history = client.get("/api/duck-history", params={"userId": "duck-alex"}).json()["history"]
    assert len(history) == 3
    assert client.get("/api/duck-history").json() == {"error": "USER_ID_REQUIRED"}


def test_empty_secret_disables_gate(open_client):
    response = open_client.post(
        "/api/admin/add-ducks", json={"userId": "duck-maria", "amount": -5, "note": "штраф"}
    )
    assert response.status_code == 200
    assert response.json()["user"]["balance"] == 40
    overdraft = open_client.post(
        "/api/admin/add-ducks", json={"userId": "duck-maria", "amount": -500, "note": "штраф"}
    )
    assert overdraft.json() == {"error": "INSUFFICIENT_BALANCE"}


def test_admin_saves_prize_and_setting(client):
    headers = {"X-Auth-Secret": SECRET}
    bad = client.post("/api/admin/prizes", json={"prize": {"prizeId": "x", "rarity": 9}}, headers=headers)
    assert bad.status_code == 400
    assert bad.json() == {"error": "INVALID_INPUT"}

    prize = {"prizeId": "prize-hoodie", "name": "Худи", "rarity": 3, "active": True}
    assert client.post("/api/admin/prizes", json={"prize": prize}, headers=headers).json() == {"success": True}
    prize_ids = [item["prizeId"] for item in client.get("/api/prizes").json()["prizes"]]
    assert "prize-hoodie" in prize_ids

    setting = {"level": "basic", "spinCost": 4, "pityStep": 0.05, "pityMax": 0.25}
    assert client.post("/api/admin/settings", json={"setting": setting}, headers=headers).status_code == 200
    assert client.get("/api/settings").json()["settings"]["basic"]["spinCost"] == 4


def test_admin_order_status(client):
    order = client.post("/api/buy", json={"userId": "duck-alex", "prizeId": "prize-stickers"}).json()["order"]
    response = client.post(
        f"/api/admin/orders/{order['orderId']}/status",
        json={"status": "delivered"},
        headers={"X-Auth-Secret": SECRET},
    )
    assert response.status_code == 200
    assert response.json()["order"]["status"] == "delivered"


def test_weights_and_overview(client):
    weights = client.get("/api/weights", params={"level": "basic", "luck": 0.2}).json()["weights"]
    assert len(weights) == 5
    assert sum(item["chance"] for item in weights) == pytest.approx(1)
    stickers = next(item for item in weights if item["prizeId"] == "prize-stickers")
    assert stickers["weight"] == pytest.approx(48)

    negative = client.get("/api/weights", params={"level": "basic", "luck": -2})
    assert negative.status_code == 400
    assert negative.json() == {"error": "INVALID_INPUT"}

    users = client.get("/api/users-overview").json()["users"]
    assert [user["userId"] for user in users] == ["duck-admin", "duck-alex", "duck-maria"]
