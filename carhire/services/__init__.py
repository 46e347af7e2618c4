from dataclasses import dataclass

from .analytics_service import AnalyticsService
from .rental_service import RentalService
from .vehicle_service import VehicleService
from ..models.repositories import RentalRepository, VehicleRepository
from ..models.store import Store


@dataclass
class Services:
    """The service instances one application shares, built once per store."""
    store: Store
    rentals: RentalService
    vehicles: VehicleService
    analytics: AnalyticsService


def build_services(store: Store) -> Services:
    rental_repo = RentalRepository(store)
    vehicle_repo = VehicleRepository(store)
    return Services(
        store=store,
        rentals=RentalService(rental_repo, vehicle_repo),
        vehicles=VehicleService(vehicle_repo, rental_repo),
        analytics=AnalyticsService(rental_repo, vehicle_repo),
    )


__all__ = [
    "RentalService",
    "VehicleService",
    "AnalyticsService",
    "Services",
    "build_services",
]
