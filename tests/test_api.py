import pytest
from fastapi.testclient import TestClient

from haul_quote.api.main import app
from haul_quote.api.state import get_session


@pytest.fixture
def client(session):
    app.dependency_overrides[get_session] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "online"


def test_get_config_returns_defaults(client):
    data = client.get("/config").json()
    assert data["baseFee"] == 120000
    assert len(data["items"]) == 8


def test_patch_config_updates_rates(client, session):
    response = client.patch("/config", json={"baseFee": 100000, "bizName": "Clean Move"})
    assert response.status_code == 200
    assert session.config.base_fee == 100000
    assert session.config.biz_name == "Clean Move"
    assert session.breakdown.total == 100000


def test_put_config_replaces_wholesale(client, session):
    response = client.put("/config", json={"baseFee": 5000, "items": [{"id": "x", "label": "Chair", "unitPrice": 1000}]})
    assert response.status_code == 200
    assert session.config.item_ids() == ["x"]
    assert session.request.quantities == {"x": 0}


def test_put_items_duplicate_is_conflict(client, session):
    before = list(session.config.items)
    response = client.put("/config/items", json=[
        {"id": "a", "label": "A", "unitPrice": 1},
        {"id": "a", "label": "B", "unitPrice": 2},
    ])
    assert response.status_code == 409
    assert session.config.items == before


def test_import_bad_json_is_rejected(client, session):
    before = client.get("/config").json()
    response = client.post("/config/import", json={"text": "not json"})
    assert response.status_code == 400
    assert client.get("/config").json() == before


def test_export_import_round_trip(client):
    client.patch("/config", json={"helperFee": 65000})
    text = client.get("/config/export").json()["text"]
    client.post("/config/reset")
    assert client.get("/config").json()["helperFee"] == 50000

    response = client.post("/config/import", json={"text": text})
    assert response.status_code == 200
    assert response.json()["helperFee"] == 65000


def test_update_quote_scenario_b(client):
    response = client.put("/quote", json={
        "distanceKm": 20, "floors": 3, "hasElevator": False, "helpers": 1,
        "weekend": True, "quantities": {"fridge": 2},
    })
    assert response.status_code == 200
    breakdown = response.json()["breakdown"]
    assert breakdown["subtotal"] == 235000
    assert breakdown["total"] == 282000


def test_price_endpoint_does_not_touch_session(client, session):
    response = client.post("/quote/price", json={"distanceKm": 20, "quantities": {"fridge": 1, "piano": 9}})
    assert response.status_code == 200
    data = response.json()
    assert data["breakdown"]["distance_surcharge"] == 10000
    assert "piano" not in data["request"]["quantities"]
    assert session.request.quantities["fridge"] == 0


def test_quote_text_and_pdf(client):
    client.put("/quote", json={"quantities": {"washer": 1}})

    text = client.get("/quote/text").text
    assert "Washing machine 1 unit" in text

    pdf = client.get("/quote/pdf")
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content[:5] == b"%PDF-"
