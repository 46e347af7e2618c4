import sys, pathlib

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import pytest

from carhire import create_app
from carhire.models.store import Store
from carhire.services import build_services

_plate_seq = iter(range(10000, 99999))

VIN_CHARS = "ABCDEFGHJKLMNPRSTUVWXYZ0123456789"


def vehicle_payload(**overrides):
    """A valid create-vehicle payload with a fresh plate and VIN each call."""
    n = next(_plate_seq)
    vin = "".join(VIN_CHARS[(n * (i + 7)) % len(VIN_CHARS)] for i in range(12)) + f"{n:05d}"
    payload = {
        "make": "Toyota",
        "modelName": "Corolla",
        "year": 2021,
        "licensePlate": f"CAR{n}",
        "vin": vin,
        "color": "White",
        "mileage": 12000,
        "fuelType": "hybrid",
        "transmission": "automatic",
        "category": "economy",
        "dailyRate": 50,
        "images": ["/static/images/corolla.jpg"],
    }
    payload.update(overrides)
    return payload


def rental_payload(vehicle_id, start="2030-06-01", end="2030-06-04", **overrides):
    payload = {
        "vehicleId": vehicle_id,
        "startDate": start,
        "endDate": end,
        "pickupLocation": "Airport",
        "dropoffLocation": "Downtown",
        "insuranceOption": "basic",
        "paymentMethod": "creditCard",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def store(tmp_path):
    """A fresh file-backed store per test."""
    return Store(tmp_path / "data.pkl", autosave=False)


@pytest.fixture
def services(store):
    return build_services(store)


@pytest.fixture
def vehicle(services):
    """One vehicle at 50/day."""
    return services.vehicles.create_vehicle(vehicle_payload())


@pytest.fixture
def app(store):
    app = create_app({"TESTING": True, "SECRET_KEY": "test", "APP_ENV": "test"}, store=store)
    return app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


def login(client, uid, role="customer"):
    """Put an authenticated principal into the test client's session."""
    with client.session_transaction() as sess:
        sess["uid"] = uid
        sess["role"] = role
