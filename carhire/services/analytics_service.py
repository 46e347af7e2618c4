from __future__ import annotations

from collections import Counter

from carhire.models.repositories import RentalRepository, VehicleRepository
from carhire.utils.constants import RentalStatus


class AnalyticsService:
    """Aggregations for the admin dashboard."""

    def __init__(self, rentals: RentalRepository, vehicles: VehicleRepository):
        self.rentals = rentals
        self.vehicles = vehicles

    def dashboard(self, recent: int = 5, popular: int = 5) -> dict:
        rentals = self.rentals.all()
        vehicles = {v["vehicle_id"]: v for v in self.vehicles.all()}

        def label(vid):
            v = vehicles.get(vid)
            if not v:
                return vid
            return f"{v.get('make', '')} {v.get('model_name', '')}".strip() or vid

        # Totals
        revenue = round(sum(float(r.get("total_cost") or 0) for r in rentals), 2)
        active = sum(1 for r in rentals if r.get("status") == RentalStatus.ACTIVE)
        available_cars = sum(1 for v in vehicles.values() if v.get("is_available"))

        # Most recent bookings
        latest = sorted(rentals, key=lambda r: r["created_at"], reverse=True)[:recent]
        recent_rentals = [{
            "rental_id": r["rental_id"],
            "user_id": r.get("user_id"),
            "vehicle": label(r.get("vehicle_id")),
            "start_date": r.get("start_date"),
            "end_date": r.get("end_date"),
            "total_cost": r.get("total_cost"),
            "status": r.get("status"),
        } for r in latest]

        # Rentals per vehicle
        cnt = Counter(r.get("vehicle_id") for r in rentals)
        popular_vehicles = [
            {"vehicle_id": vid, "vehicle": label(vid), "count": n}
            for vid, n in cnt.most_common(popular)
        ]

        by_status = Counter(r.get("status") for r in rentals)

        return {
            "totals": {
                "rentals": len(rentals),
                "active_rentals": active,
                "revenue": revenue,
                "available_cars": available_cars,
                "vehicles": len(vehicles),
            },
            "recent_rentals": recent_rentals,
            "popular_vehicles": popular_vehicles,
            "rentals_by_status": {s: by_status.get(s, 0) for s in sorted(RentalStatus.ALL)},
        }
