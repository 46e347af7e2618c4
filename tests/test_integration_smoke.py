"""
Smoke test: public catalogue routes respond and unknown routes use the JSON error body.
"""


def test_vehicle_list_is_public(client, vehicle):
    resp = client.get("/api/vehicles?make=toy&limit=5")
    assert resp.status_code == 200
    assert "max-age=60" in resp.headers["Cache-Control"]
    body = resp.get_json()
    assert body["totalVehicles"] == 1
    assert body["vehicles"][0]["id"] == vehicle["vehicle_id"]
    assert body["vehicles"][0]["modelName"] == "Corolla"


def test_vehicle_detail(client, vehicle):
    assert client.get(f"/api/vehicles/{vehicle['vehicle_id']}").get_json()["licensePlate"] == vehicle["license_plate"]
    resp = client.get("/api/vehicles/missing")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_bad_query_is_400(client):
    assert client.get("/api/vehicles?sortBy=colour").status_code == 400


def test_unknown_route_is_json(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False
