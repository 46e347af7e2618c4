"""Rental booking and lifecycle operations."""

import logging
from datetime import datetime
from typing import Optional

from carhire.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    RentalNotFoundError,
    ValidationError,
    VehicleNotFoundError,
)
from carhire.models.rental import Rental, RentalPatch, RentalRequest
from carhire.models.repositories import RentalRepository, VehicleRepository
from carhire.models.user import Principal
from carhire.models.vehicle import Vehicle, summary as vehicle_summary
from carhire.services.common import paginate
from carhire.utils.constants import RentalStatus, PaymentStatus
from carhire.utils.dates import ceil_days, parse_instant, utcnow

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "Vehicle not available for selected dates"


class RentalService:
    """
    Availability checks and the rental state machine.

    Every check-then-write sequence runs inside one store transaction, so two
    overlapping bookings for the same vehicle can never both commit.
    """

    def __init__(self, rentals: RentalRepository, vehicles: VehicleRepository):
        self.rentals = rentals
        self.vehicles = vehicles

    # --------------- Queries ---------------
    def check_availability(
            self,
            vehicle_id: str,
            start: datetime,
            end: datetime,
            exclude_rental_id: Optional[str] = None,
    ) -> bool:
        """
        True iff no pending/active rental of the vehicle intersects [start, end).
        ``exclude_rental_id`` leaves one rental out of the scan (used when re-dating it).
        """
        conflicts = self.rentals.find_overlapping(
            vehicle_id, start, end, RentalStatus.BLOCKING, exclude_id=exclude_rental_id
        )
        return not conflicts

    def query_availability(self, vehicle_id: str, start_raw, end_raw) -> bool:
        """Validated form of check_availability for raw request values."""
        if not vehicle_id:
            raise ValidationError("vehicleId is required")
        start = parse_instant(start_raw, "startDate")
        end = parse_instant(end_raw, "endDate")
        if start >= end:
            raise ValidationError("Invalid date range: startDate must be before endDate")
        if self.vehicles.get(vehicle_id) is None:
            raise VehicleNotFoundError()
        return self.check_availability(vehicle_id, start, end)

    def get_rental(self, rental_id: str, principal: Optional[Principal] = None) -> dict:
        r = self._load(rental_id, principal)
        return self._populate(r)

    def list_rentals(self, principal: Principal, status: Optional[str] = None, page=1, limit=10) -> dict:
        """Newest first; customers only see their own rentals."""
        if status is not None and status not in RentalStatus.ALL:
            raise ValidationError(f"Unknown rental status: {status!r}")
        criteria = {}
        if not principal.is_admin:
            criteria["user_id"] = principal.user_id
        if status:
            criteria["status"] = status
        rows = self.rentals.find(**criteria)
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        items, pagination = paginate(rows, page, limit)
        return {"data": [self._populate(r) for r in items], "pagination": pagination}

    def find_active_rentals(self) -> list[dict]:
        return [self._populate(r) for r in self.rentals.find(status=RentalStatus.ACTIVE)]

    def find_overdue_rentals(self, now: Optional[datetime] = None) -> list[dict]:
        """Active rentals whose end has already passed."""
        now = now or utcnow()
        return [
            self._populate(r) for r in self.rentals.find(status=RentalStatus.ACTIVE)
            if Rental.from_dict(r).is_overdue(now)
        ]

    def availability_calendar(self, vehicle_id: str) -> list[tuple[datetime, datetime]]:
        """
        Return (start, end) pairs of pending/active rentals for one vehicle.
        Used by clients to disable booked ranges.
        """
        if self.vehicles.get(vehicle_id) is None:
            raise VehicleNotFoundError()
        rows = self.rentals.find_by_vehicle_and_status(vehicle_id, RentalStatus.BLOCKING)
        ranges = [(r["start_date"], r["end_date"]) for r in rows]
        ranges.sort(key=lambda t: t[0])
        return ranges

    # --------------- Commands ---------------
    def create_rental(self, user_id: str, payload: dict) -> dict:
        """
        Book a vehicle for [startDate, endDate).
        Raises ValidationError, VehicleNotFoundError or ConflictError; on any
        failure nothing is written.
        """
        if not user_id:
            raise ValidationError("user id is required")
        req = RentalRequest.from_payload(payload)

        with self.rentals.transaction():
            vehicle = self.vehicles.get(req.vehicle_id)
            if vehicle is None:
                raise VehicleNotFoundError()

            if not self.check_availability(req.vehicle_id, req.start_date, req.end_date):
                logger.warning("Booking conflict on vehicle %s for %s..%s",
                               req.vehicle_id, req.start_date, req.end_date)
                raise ConflictError(NOT_AVAILABLE)

            total = round(Vehicle.from_dict(vehicle).price_for_days(ceil_days(req.start_date, req.end_date)), 2)

            created = self.rentals.create({
                "user_id": str(user_id),
                "vehicle_id": req.vehicle_id,
                "start_date": req.start_date,
                "end_date": req.end_date,
                "total_cost": total,
                "status": RentalStatus.PENDING,
                "pickup_location": req.pickup_location,
                "dropoff_location": req.dropoff_location,
                "additional_drivers": req.additional_drivers,
                "insurance_option": req.insurance_option,
                "payment_method": req.payment_method,
                "payment_status": PaymentStatus.PENDING,
            })

        logger.info("New rental created: %s", created["rental_id"])
        return self._populate(created, vehicle)

    def update_rental(self, rental_id: str, payload: dict, principal: Optional[Principal] = None) -> dict:
        """
        Apply a RentalPatch. Dates first (pending rentals only, re-checked
        against every other booking), then plain fields, then the status
        change through the state machine.
        """
        patch = RentalPatch.from_payload(payload)

        with self.rentals.transaction():
            current = self._load(rental_id, principal)
            rental = Rental.from_dict(current)

            if patch.changes_dates:
                self._redate(rental, patch)
            if patch.additional_drivers is not None:
                rental.additional_drivers = patch.additional_drivers
            if patch.insurance_option is not None:
                rental.insurance_option = patch.insurance_option
            if patch.status is not None:
                self._apply_status(rental, patch.status)

            updated = self.rentals.update(rental.rental_id, {
                "start_date": rental.start_date,
                "end_date": rental.end_date,
                "total_cost": rental.total_cost,
                "additional_drivers": rental.additional_drivers,
                "insurance_option": rental.insurance_option,
                "status": rental.status,
            })

        logger.info("Rental updated: %s", rental_id)
        return self._populate(updated)

    def cancel(self, rental_id: str, principal: Optional[Principal] = None) -> dict:
        return self._lifecycle(rental_id, principal, Rental.cancel)

    def complete(self, rental_id: str, principal: Optional[Principal] = None) -> dict:
        return self._lifecycle(rental_id, principal, Rental.complete)

    def delete_rental(self, rental_id: str) -> None:
        """Hard delete regardless of status. Callers restrict this to admins."""
        if self.rentals.delete(rental_id) is None:
            raise RentalNotFoundError()
        logger.info("Rental deleted: %s", rental_id)

    # --------------- internals ---------------
    def _load(self, rental_id: str, principal: Optional[Principal]) -> dict:
        r = self.rentals.get(rental_id)
        if r is None:
            raise RentalNotFoundError()
        if principal is not None and not principal.can_access(r):
            raise AuthorizationError("Forbidden")
        return r

    def _lifecycle(self, rental_id, principal, step) -> dict:
        with self.rentals.transaction():
            rental = Rental.from_dict(self._load(rental_id, principal))
            try:
                step(rental)
            except InvalidTransitionError:
                logger.warning("Refused %s on rental %s in status %s", step.__name__, rental_id, rental.status)
                raise
            updated = self.rentals.update(rental_id, {"status": rental.status})
        logger.info("Rental %s is now %s", rental_id, rental.status)
        return self._populate(updated)

    @staticmethod
    def _apply_status(rental: Rental, new_status: str) -> None:
        if new_status == RentalStatus.CANCELLED:
            rental.cancel()
        elif new_status == RentalStatus.COMPLETED:
            rental.complete()
        else:
            rental.transition_to(new_status)

    def _redate(self, rental: Rental, patch: RentalPatch) -> None:
        if rental.status != RentalStatus.PENDING:
            raise ValidationError("Only pending rentals can change dates")

        start = patch.start_date or rental.start_date
        end = patch.end_date or rental.end_date
        if start >= end:
            raise ValidationError("Invalid date range: startDate must be before endDate")
        if not self.check_availability(rental.vehicle_id, start, end, exclude_rental_id=rental.rental_id):
            logger.warning("Re-dating rental %s conflicts on vehicle %s", rental.rental_id, rental.vehicle_id)
            raise ConflictError(NOT_AVAILABLE)

        vehicle = self.vehicles.get(rental.vehicle_id)
        if vehicle is None:
            raise VehicleNotFoundError()
        rental.start_date, rental.end_date = start, end
        rental.total_cost = round(Vehicle.from_dict(vehicle).price_for_days(ceil_days(start, end)), 2)

    def _populate(self, r: dict, vehicle: Optional[dict] = None) -> dict:
        """Attach derived fields and the user/vehicle summaries."""
        rental = Rental.from_dict(r)
        out = rental.to_dict()
        out["duration"] = rental.duration
        out["is_active"] = rental.is_active
        out["user"] = {"user_id": rental.user_id}
        out["vehicle"] = vehicle_summary(vehicle or self.vehicles.get(rental.vehicle_id))
        return out
