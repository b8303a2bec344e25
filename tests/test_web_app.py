import pytest
from unittest.mock import patch

import web_app
from conftest import read_file
from core.errors import PersistenceError
from web_app import app as flask_app  # Use a different name to avoid conflict


@pytest.fixture
def app(monkeypatch):
    """Create and configure a new app instance for each test, with no store loaded."""
    flask_app.config.update({
        "TESTING": True,
    })
    monkeypatch.setattr(web_app, "store", None)
    yield flask_app


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def loaded_client(client, base_dir, mod_dir):
    """A test client with the sample base game and mod loaded."""
    response = client.post("/load", json={"base_dir": base_dir, "mod_dir": mod_dir})
    assert response.status_code == 200
    return client


def test_routes_require_a_loaded_store(client):
    response = client.get("/provinces")
    assert response.status_code == 409
    assert "POST /load" in response.get_json()["error"]


def test_load_validation(client, tmp_path):
    assert client.post("/load", json={}).status_code == 400

    response = client.post("/load", json={"mod_dir": str(tmp_path / "missing")})
    assert response.status_code == 404


def test_load_reports_count(client, base_dir, mod_dir):
    response = client.post("/load", json={"base_dir": base_dir, "mod_dir": mod_dir})
    assert response.status_code == 200
    assert response.get_json()["count"] == 3


def test_get_province(loaded_client):
    response = loaded_client.get("/provinces/ababab")
    assert response.status_code == 200
    json_data = response.get_json()
    assert json_data["name"] == "stockholm"
    assert json_data["state"] == "unchanged"
    assert json_data["location"]["topography"] == "flatland"
    assert json_data["pops"] == [
        {"type": "nobles", "size": "0.00021", "culture": "swedish", "religion": "lutheran"}
    ]

    assert loaded_client.get("/provinces/000000").status_code == 404


def test_list_provinces_with_filter(loaded_client):
    response = loaded_client.get("/provinces?name=upp")
    names = [p["name"] for p in response.get_json()["provinces"]]
    assert names == ["uppsala"]


def test_paint_new_province(loaded_client):
    response = loaded_client.post("/provinces/123456/paint", json={"topography": "hills"})
    assert response.status_code == 200
    json_data = response.get_json()
    assert json_data["state"] == "added"
    assert json_data["name"].startswith("___")

    response = loaded_client.post("/provinces/123456/paint", json={"colour": "red"})
    assert response.status_code == 400


def test_paint_pops(loaded_client):
    response = loaded_client.post(
        "/provinces/EFEFEF/pops",
        json={"pops": [{"type": "burghers", "size": "0.002", "culture": "gotlandic", "religion": "lutheran"}]},
    )
    assert response.status_code == 200
    assert [p["type"] for p in response.get_json()["pops"]] == ["peasants", "burghers"]

    response = loaded_client.post("/provinces/EFEFEF/pops", json={"pops": [{"type": "burghers"}]})
    assert response.status_code == 400


def test_paint_pops_rejects_non_finite_size(loaded_client):
    response = loaded_client.post(
        "/provinces/EFEFEF/pops",
        json={"pops": [{"type": "burghers", "size": "Infinity", "culture": "gotlandic", "religion": "lutheran"}]},
    )
    assert response.status_code == 400
    assert not loaded_client.get("/changes").get_json()["count"]


def test_rename_and_save(loaded_client, mod_dir):
    response = loaded_client.post("/provinces/CDCDCD/rename", json={"name": "upsala"})
    assert response.status_code == 200
    assert response.get_json()["origin_name"] == "uppsala"

    changes = loaded_client.get("/changes").get_json()
    assert changes["count"] == 1
    assert changes["summary"] == {"added": 0, "modified": 1, "deleted": 0}

    response = loaded_client.post("/save")
    assert response.status_code == 200
    assert response.get_json()["saved"] == 1
    assert "upsala = CDCDCD" in read_file(mod_dir, "in_game/map_data/named_locations/00_named_locations.txt")
    assert loaded_client.get("/changes").get_json()["count"] == 0


def test_rename_errors(loaded_client):
    assert loaded_client.post("/provinces/000000/rename", json={"name": "x"}).status_code == 404
    assert loaded_client.post("/provinces/CDCDCD/rename", json={"name": "stockholm"}).status_code == 409
    assert loaded_client.post("/provinces/CDCDCD/rename", json={}).status_code == 400


def test_delete_and_rollback(loaded_client):
    response = loaded_client.delete("/provinces/EFEFEF")
    assert response.status_code == 200
    assert loaded_client.get("/changes").get_json()["summary"]["deleted"] == 1
    assert loaded_client.delete("/provinces/EFEFEF").status_code == 200
    assert loaded_client.delete("/provinces/000000").status_code == 404

    response = loaded_client.post("/rollback")
    assert response.status_code == 200
    assert response.get_json()["count"] == 3
    assert loaded_client.get("/provinces/EFEFEF").status_code == 200


def test_save_failure_is_reported(loaded_client):
    with patch.object(web_app.store, "save_changes", side_effect=PersistenceError("boom")):
        response = loaded_client.post("/save")
    assert response.status_code == 500
    assert "boom" in response.get_json()["error"]


def test_definitions(loaded_client):
    response = loaded_client.get("/definitions/cultures?q=swe")
    assert response.status_code == 200
    assert response.get_json()["values"][0] == "swedish"

    assert loaded_client.get("/definitions/weather").status_code == 404


def test_unknown_route_returns_json(client):
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Not found"}
