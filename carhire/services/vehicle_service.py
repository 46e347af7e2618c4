import logging
from typing import Optional

from carhire.exceptions import ConflictError, ValidationError, VehicleNotFoundError
from carhire.models.repositories import RentalRepository, VehicleRepository
from carhire.models.vehicle import Vehicle, next_service_due, validate_vehicle_payload
from carhire.services.common import _lc, paginate, to_float_safe
from carhire.utils.constants import CATEGORIES, RentalStatus
from carhire.utils.dates import parse_instant

logger = logging.getLogger(__name__)

SORTABLE = {"createdAt": "created_at", "dailyRate": "daily_rate", "year": "year", "make": "make"}
REQUIRED_ON_CREATE = ("make", "modelName", "year", "licensePlate", "vin", "color", "mileage",
                      "fuelType", "transmission", "category", "dailyRate")


class VehicleService:
    """Vehicle catalogue: filter, create, update, delete, servicing."""

    def __init__(self, vehicles: VehicleRepository, rentals: RentalRepository):
        self.vehicles = vehicles
        self.rentals = rentals

    # --------------- Queries ---------------
    def filter_vehicles(
            self,
            make=None,
            model=None,
            year=None,
            min_daily_rate=None,
            max_daily_rate=None,
            is_available=None,
            category=None,
            start=None,
            end=None,
            sort_by="createdAt",
            sort_order="desc",
            page=1,
            limit=10,
    ) -> dict:
        """
        Filter the catalogue.
        - make/model: case-insensitive partial match
        - min/max daily rate: invalid values ignored, swapped if inverted
        - start/end: keep only vehicles with no pending/active booking in [start, end)
        """
        res = self.vehicles.all()

        if make:
            kw = _lc(make).strip()
            res = [v for v in res if kw in _lc(v.get("make"))]
        if model:
            kw = _lc(model).strip()
            res = [v for v in res if kw in _lc(v.get("model_name"))]

        if year not in (None, ""):
            try:
                y = int(year)
            except (TypeError, ValueError):
                raise ValidationError("year must be an integer") from None
            res = [v for v in res if v.get("year") == y]

        if category:
            if category not in CATEGORIES:
                raise ValidationError(f"category must be one of {', '.join(sorted(CATEGORIES))}")
            res = [v for v in res if v.get("category") == category]

        if is_available in (True, "true"):
            res = [v for v in res if v.get("is_available")]

        min_val = to_float_safe(min_daily_rate)
        max_val = to_float_safe(max_daily_rate)
        if (min_val is not None) and (max_val is not None) and (min_val > max_val):
            min_val, max_val = max_val, min_val
        if min_val is not None:
            res = [v for v in res if float(v.get("daily_rate", 0)) >= min_val]
        if max_val is not None:
            res = [v for v in res if float(v.get("daily_rate", 0)) <= max_val]

        if start or end:
            if not (start and end):
                raise ValidationError("Both startDate and endDate are required to filter by dates")
            s = parse_instant(start, "startDate")
            e = parse_instant(end, "endDate")
            if s >= e:
                raise ValidationError("Invalid date range: startDate must be before endDate")
            res = [
                v for v in res
                if not self.rentals.find_overlapping(v["vehicle_id"], s, e, RentalStatus.BLOCKING)
            ]

        key = SORTABLE.get(sort_by)
        if key is None:
            raise ValidationError(f"sortBy must be one of {', '.join(sorted(SORTABLE))}")
        res.sort(key=lambda v: v.get(key), reverse=(sort_order != "asc"))

        items, pagination = paginate(res, page, limit)
        return {
            "vehicles": [self._present(v) for v in items],
            "totalPages": pagination["totalPages"],
            "currentPage": pagination["currentPage"],
            "totalVehicles": pagination["totalItems"],
        }

    def get_vehicle(self, vehicle_id: str) -> dict:
        """Return a vehicle by ID or raise VehicleNotFoundError."""
        v = self.vehicles.get(vehicle_id)
        if v is None:
            raise VehicleNotFoundError(f"Error: vehicle with ID '{vehicle_id}' not found")
        return self._present(v)

    def find_available_by_category(self, category: str) -> list[dict]:
        if category not in CATEGORIES:
            raise ValidationError(f"category must be one of {', '.join(sorted(CATEGORIES))}")
        return [self._present(v) for v in self.vehicles.find(category=category, is_available=True)]

    def has_outstanding_rentals(self, vehicle_id: str) -> bool:
        return bool(self.rentals.find_by_vehicle_and_status(vehicle_id, RentalStatus.BLOCKING))

    # --------------- Commands ---------------
    def create_vehicle(self, payload: dict) -> dict:
        """Validate and store a new vehicle. Duplicate plate/VIN raises ConflictError."""
        missing = [k for k in REQUIRED_ON_CREATE if not isinstance(payload, dict) or payload.get(k) in (None, "")]
        if missing:
            raise ValidationError("Validation failed", [f"{k} is required" for k in missing])
        data = validate_vehicle_payload(payload)

        data.setdefault("is_available", True)
        data.setdefault("features", [])
        data.setdefault("images", [])
        data.setdefault("maintenance_history", [])
        data.setdefault("last_serviced", None)
        if not data.get("primary_image"):
            data["primary_image"] = data["images"][0] if data["images"] else None
        elif data["primary_image"] not in data["images"]:
            raise ValidationError("Image not found in vehicle images")
        data["next_service_due"] = next_service_due(data["last_serviced"])

        created = self.vehicles.create(data)
        logger.info("New vehicle created: %s", created["vehicle_id"])
        return self._present(created)

    def update_vehicle(self, vehicle_id: str, payload: dict) -> dict:
        """Partial update; keeps primary image and next-service-due consistent."""
        updates = validate_vehicle_payload(payload, partial=True)
        if not updates:
            raise ValidationError("No valid fields to update")

        with self.vehicles.transaction():
            current = self.vehicles.get(vehicle_id)
            if current is None:
                raise VehicleNotFoundError()

            if "images" in updates:
                images = updates["images"]
                primary = updates.get("primary_image") or current.get("primary_image")
                if primary not in images:
                    updates["primary_image"] = images[0] if images else None
            elif "primary_image" in updates and updates["primary_image"] not in current.get("images", []):
                raise ValidationError("Image not found in vehicle images")

            if "last_serviced" in updates:
                updates["next_service_due"] = next_service_due(updates["last_serviced"])

            updated = self.vehicles.update(vehicle_id, updates)

        logger.info("Vehicle updated: %s", vehicle_id)
        return self._present(updated)

    def delete_vehicle(self, vehicle_id: str) -> None:
        """
        Delete a vehicle if and only if no pending/active rental references it.
        Rentals are the single source of truth, not the availability flag.
        """
        with self.vehicles.transaction():
            if self.vehicles.get(vehicle_id) is None:
                raise VehicleNotFoundError()
            if self.has_outstanding_rentals(vehicle_id):
                raise ConflictError("Cannot delete: pending or active rentals exist")
            self.vehicles.delete(vehicle_id)
        logger.info("Vehicle deleted: %s", vehicle_id)

    def record_service(self, vehicle_id: str, payload: dict) -> dict:
        """Append a maintenance entry and move last-serviced / next-service-due."""
        if not isinstance(payload, dict):
            raise ValidationError("Invalid input")
        description = payload.get("description")
        description = description.strip() if isinstance(description, str) else ""
        raw_cost = payload.get("cost")
        cost = None if isinstance(raw_cost, bool) else to_float_safe(raw_cost)
        errors = []
        if not description:
            errors.append("description is required")
        if cost is None or cost < 0:
            errors.append("cost must be a non-negative number")
        if errors:
            raise ValidationError("Validation failed", errors)
        when = parse_instant(payload.get("date"), "date")

        with self.vehicles.transaction():
            current = self.vehicles.get(vehicle_id)
            if current is None:
                raise VehicleNotFoundError()
            vehicle = Vehicle.from_dict(current)
            vehicle.record_service(when, description, cost)
            updated = self.vehicles.update(vehicle_id, {
                "maintenance_history": vehicle.maintenance_history,
                "last_serviced": vehicle.last_serviced,
                "next_service_due": vehicle.next_service_due,
            })
        logger.info("Service recorded for vehicle %s", vehicle_id)
        return self._present(updated)

    def set_primary_image(self, vehicle_id: str, url: Optional[str]) -> dict:
        with self.vehicles.transaction():
            current = self.vehicles.get(vehicle_id)
            if current is None:
                raise VehicleNotFoundError()
            vehicle = Vehicle.from_dict(current)
            vehicle.set_primary_image(url.strip() if isinstance(url, str) else "")
            updated = self.vehicles.update(vehicle_id, {"primary_image": vehicle.primary_image})
        return self._present(updated)

    @staticmethod
    def _present(d: dict) -> dict:
        """Stored document plus the derived age / needs_service fields."""
        vehicle = Vehicle.from_dict(d)
        out = vehicle.to_dict()
        out["age"] = vehicle.age
        out["needs_service"] = vehicle.needs_service()
        return out
