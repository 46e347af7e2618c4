"""
End-to-end rental flow through the HTTP API:
create -> conflict -> view -> activate -> complete, plus availability lookup.
"""
from conftest import login, rental_payload, vehicle_payload


def test_rental_lifecycle_over_http(client, vehicle):
    vid = vehicle["vehicle_id"]
    login(client, "u1")

    resp = client.post("/api/rentals", json=rental_payload(vid, "2030-01-10", "2030-01-13"))
    assert resp.status_code == 201, resp.data
    body = resp.get_json()
    assert body["success"] is True
    rental = body["data"]
    assert rental["totalCost"] == 150
    assert rental["status"] == "pending"
    assert rental["startDate"].startswith("2030-01-10T00:00:00")
    rid = rental["id"]

    resp = client.post("/api/rentals", json=rental_payload(vid, "2030-01-12", "2030-01-14"))
    assert resp.status_code == 409
    assert resp.get_json() == {"success": False, "message": "Vehicle not available for selected dates"}

    assert client.get(f"/api/rentals/{rid}").get_json()["data"]["vehicle"]["make"] == "Toyota"

    login(client, "admin1", role="admin")
    resp = client.put(f"/api/rentals/{rid}", json={"status": "active"})
    assert resp.get_json()["data"]["isActive"] is True

    resp = client.put(f"/api/rentals/{rid}", json={"status": "completed"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "completed"

    resp = client.put(f"/api/rentals/{rid}", json={"status": "cancelled"})
    assert resp.status_code == 400


def test_validation_errors_are_listed(client, vehicle):
    login(client, "u1")
    resp = client.post("/api/rentals", json={"vehicleId": vehicle["vehicle_id"]})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["message"] == "Missing required fields"
    assert "startDate is required" in body["errors"]

    resp = client.post("/api/rentals", json=rental_payload("missing"))
    assert resp.status_code == 404


def test_customer_cancels_own_rental(client, vehicle):
    login(client, "u1")
    rid = client.post("/api/rentals", json=rental_payload(vehicle["vehicle_id"])).get_json()["data"]["id"]

    resp = client.put(f"/api/rentals/{rid}", json={"status": "cancelled"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "cancelled"

    resp = client.put(f"/api/rentals/{rid}", json={"foo": "bar"})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "No valid updates provided"


def test_availability_endpoint(client, vehicle):
    vid = vehicle["vehicle_id"]
    login(client, "u1")
    client.post("/api/rentals", json=rental_payload(vid, "2030-01-10", "2030-01-15"))

    def available(start, end):
        resp = client.get(f"/api/rentals/availability?vehicleId={vid}&startDate={start}&endDate={end}")
        assert resp.status_code == 200
        return resp.get_json()["available"]

    assert available("2030-01-14", "2030-01-16") is False
    assert available("2030-01-15", "2030-01-16") is True

    resp = client.get(f"/api/rentals/availability?vehicleId={vid}&startDate=2030-01-16&endDate=2030-01-15")
    assert resp.status_code == 400


def test_list_rentals_paginated(client, vehicle):
    login(client, "u1")
    for start, end in (("2030-02-01", "2030-02-03"), ("2030-02-05", "2030-02-07"), ("2030-02-09", "2030-02-11")):
        client.post("/api/rentals", json=rental_payload(vehicle["vehicle_id"], start, end))

    body = client.get("/api/rentals?page=1&limit=2").get_json()
    assert len(body["data"]) == 2
    assert body["pagination"] == {"currentPage": 1, "totalPages": 2, "totalItems": 3}


def test_vehicle_calendar(client, vehicle):
    login(client, "u1")
    client.post("/api/rentals", json=rental_payload(vehicle["vehicle_id"], "2030-01-10", "2030-01-15"))

    body = client.get(f"/api/vehicles/{vehicle['vehicle_id']}/calendar").get_json()
    assert len(body["data"]) == 1
    assert body["data"][0]["start"].startswith("2030-01-10")


def test_non_string_choices_are_400(client, vehicle):
    login(client, "u1")
    resp = client.post("/api/rentals", json=rental_payload(vehicle["vehicle_id"], insuranceOption=["basic"]))
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False

    rid = client.post("/api/rentals", json=rental_payload(vehicle["vehicle_id"])).get_json()["data"]["id"]
    resp = client.put(f"/api/rentals/{rid}", json={"status": {"a": 1}})
    assert resp.status_code == 400

    login(client, "boss", role="admin")
    resp = client.post("/api/vehicles", json=vehicle_payload(fuelType=["diesel"]))
    assert resp.status_code == 400
    resp = client.put(f"/api/vehicles/{vehicle['vehicle_id']}/primary-image", json=["not", "an", "object"])
    assert resp.status_code == 400


def test_edge_of_calendar_date_is_400(client, vehicle):
    login(client, "u1")
    resp = client.post(
        "/api/rentals", json=rental_payload(vehicle["vehicle_id"], "0001-01-01T00:00:00+01:00", "2030-01-01")
    )
    assert resp.status_code == 400
