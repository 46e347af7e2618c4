from __future__ import annotations

import re
from dataclasses import dataclass, field, fields, asdict
from datetime import datetime, timedelta
from typing import Optional

from carhire.exceptions import ValidationError
from carhire.utils.constants import (
    FUEL_TYPES,
    TRANSMISSIONS,
    CATEGORIES,
    SERVICE_INTERVAL_DAYS,
    MAX_IMAGES,
)
from carhire.utils.dates import parse_instant, utcnow

PLATE_PATTERN = re.compile(r"^[A-Z0-9]{5,8}$")
VIN_PATTERN = re.compile(r"^[A-HJ-NPR-Z0-9]{17}$")


@dataclass
class MaintenanceEntry:
    date: datetime
    description: str
    cost: float


@dataclass
class Vehicle:
    """
    Rich vehicle object. ``daily_rate`` is the listed price per day; the rental
    total is that rate times the number of (rounded-up) days.
    """
    vehicle_id: str
    make: str
    model_name: str
    year: int
    license_plate: str
    vin: str
    color: str
    mileage: int
    fuel_type: str
    transmission: str
    category: str
    daily_rate: float
    is_available: bool = True
    features: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    primary_image: Optional[str] = None
    maintenance_history: list[dict] = field(default_factory=list)
    last_serviced: Optional[datetime] = None
    next_service_due: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, d: dict) -> "Vehicle":
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in d.items() if k in names})

    def to_dict(self) -> dict:
        return asdict(self)

    @property
    def age(self) -> int:
        return utcnow().year - self.year

    def needs_service(self, now: Optional[datetime] = None) -> bool:
        if not self.next_service_due:
            return False
        return (now or utcnow()) >= self.next_service_due

    def price_for_days(self, days: int) -> float:
        return float(self.daily_rate) * days

    def record_service(self, when: datetime, description: str, cost: float) -> None:
        self.maintenance_history.append(asdict(MaintenanceEntry(when, description, cost)))
        if self.last_serviced is None or when >= self.last_serviced:
            self.last_serviced = when
            self.next_service_due = next_service_due(when)

    def set_primary_image(self, url: str) -> None:
        if url not in self.images:
            raise ValidationError("Image not found in vehicle images")
        self.primary_image = url


def next_service_due(last_serviced: Optional[datetime]) -> Optional[datetime]:
    if last_serviced is None:
        return None
    return last_serviced + timedelta(days=SERVICE_INTERVAL_DAYS)


def summary(d: Optional[dict]) -> Optional[dict]:
    """The short form embedded in rental responses."""
    if not d:
        return None
    return {
        "vehicle_id": d.get("vehicle_id"),
        "make": d.get("make"),
        "model_name": d.get("model_name"),
        "year": d.get("year"),
    }


# -------- payload validation --------
def _num(value):
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def validate_vehicle_payload(payload: Optional[dict], partial: bool = False) -> dict:
    """
    Map an incoming camelCase payload to stored snake_case fields.
    With ``partial`` only the fields present are checked and returned.
    Raises ValidationError listing every problem found.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid input")

    errors: list[str] = []
    out: dict = {}

    def present(key):
        return not partial or key in payload

    def text(key, dest, upper=False):
        if not present(key):
            return
        value = payload.get(key)
        if not isinstance(value, str) or not value.strip():
            errors.append(f"{key} is required")
            return
        value = value.strip()
        out[dest] = value.upper() if upper else value

    text("make", "make")
    text("modelName", "model_name")
    text("color", "color")
    text("licensePlate", "license_plate", upper=True)
    text("vin", "vin", upper=True)

    if "license_plate" in out and not PLATE_PATTERN.match(out["license_plate"]):
        errors.append(f"{out['license_plate']} is not a valid license plate number")
    if "vin" in out and not VIN_PATTERN.match(out["vin"]):
        errors.append(f"{out['vin']} is not a valid VIN")

    if present("year"):
        year = payload.get("year")
        max_year = utcnow().year + 1
        if isinstance(year, bool) or not isinstance(year, int) or not 1900 <= year <= max_year:
            errors.append(f"year must be an integer between 1900 and {max_year}")
        else:
            out["year"] = year

    if present("mileage"):
        mileage = payload.get("mileage")
        if isinstance(mileage, bool) or not isinstance(mileage, int) or mileage < 0:
            errors.append("mileage must be a non-negative integer")
        else:
            out["mileage"] = mileage

    if present("dailyRate"):
        rate = _num(payload.get("dailyRate"))
        if rate is None or rate < 0:
            errors.append("Daily rate cannot be negative" if rate is not None else "Valid daily rate is required")
        else:
            out["daily_rate"] = rate

    for key, dest, allowed in (
            ("fuelType", "fuel_type", FUEL_TYPES),
            ("transmission", "transmission", TRANSMISSIONS),
            ("category", "category", CATEGORIES),
    ):
        if present(key):
            value = payload.get(key)
            if not isinstance(value, str) or value not in allowed:
                errors.append(f"{key} must be one of {', '.join(sorted(allowed))}")
            else:
                out[dest] = value

    if "isAvailable" in payload:
        if not isinstance(payload["isAvailable"], bool):
            errors.append("isAvailable must be a boolean")
        else:
            out["is_available"] = payload["isAvailable"]

    for key, dest in (("features", "features"), ("images", "images")):
        if key in payload:
            items = payload[key]
            if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
                errors.append(f"{key} must be a list of strings")
            else:
                out[dest] = [i.strip() for i in items if i.strip()]

    if "images" in out:
        out["images"] = out["images"][:MAX_IMAGES]

    if "primaryImage" in payload and payload["primaryImage"] is not None:
        out["primary_image"] = str(payload["primaryImage"]).strip()

    if "lastServiced" in payload:
        # an explicit null clears the service schedule
        if payload["lastServiced"] is None:
            out["last_serviced"] = None
        else:
            try:
                out["last_serviced"] = parse_instant(payload["lastServiced"], "lastServiced")
            except ValidationError as e:
                errors.append(e.message)

    if errors:
        raise ValidationError("Validation failed", errors)
    return out
