from __future__ import annotations

from dataclasses import dataclass, fields, asdict
from datetime import datetime
from typing import Optional

from carhire.exceptions import ValidationError, InvalidTransitionError
from carhire.utils.constants import (
    RentalStatus,
    PaymentStatus,
    INSURANCE_OPTIONS,
    PAYMENT_METHODS,
)
from carhire.utils.dates import ceil_days, parse_instant, utcnow

# Allowed status moves. Terminal states have no way out.
TRANSITIONS = {
    RentalStatus.PENDING: frozenset({RentalStatus.ACTIVE, RentalStatus.CANCELLED}),
    RentalStatus.ACTIVE: frozenset({RentalStatus.COMPLETED, RentalStatus.CANCELLED}),
    RentalStatus.COMPLETED: frozenset(),
    RentalStatus.CANCELLED: frozenset(),
}


@dataclass
class Rental:
    """
    Rich rental object. The Store keeps raw dicts; we wrap them to express
    the lifecycle rules in one place.
    """
    rental_id: str
    user_id: str
    vehicle_id: str
    start_date: datetime
    end_date: datetime
    total_cost: float
    pickup_location: str
    dropoff_location: str
    insurance_option: str
    payment_method: str
    additional_drivers: int = 0
    status: str = RentalStatus.PENDING
    payment_status: str = PaymentStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, d: dict) -> "Rental":
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in d.items() if k in names})

    def to_dict(self) -> dict:
        return asdict(self)

    # ---- derived ----
    @property
    def duration(self) -> int:
        """Whole days covered, rounded up."""
        return ceil_days(self.start_date, self.end_date)

    @property
    def is_active(self) -> bool:
        return self.status == RentalStatus.ACTIVE

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        return self.is_active and self.end_date < (now or utcnow())

    # ---- lifecycle ----
    def can_transition_to(self, new_status: str) -> bool:
        return new_status in TRANSITIONS.get(self.status, frozenset())

    def transition_to(self, new_status: str) -> None:
        if new_status not in RentalStatus.ALL:
            raise ValidationError(f"Unknown rental status: {new_status!r}")
        if not self.can_transition_to(new_status):
            raise InvalidTransitionError(f"Cannot transition from {self.status} to {new_status}")
        self.status = new_status

    def cancel(self) -> None:
        if self.status in RentalStatus.TERMINAL:
            raise InvalidTransitionError("Only pending or active rentals can be cancelled")
        self.status = RentalStatus.CANCELLED

    def complete(self) -> None:
        if self.status != RentalStatus.ACTIVE:
            raise InvalidTransitionError("Only active rentals can be completed")
        self.status = RentalStatus.COMPLETED


# -------- validators --------
def _required_str(payload: dict, key: str, errors: list[str]) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        errors.append(f"{key} is required")
        return ""
    return value.strip()


def _choice(value, allowed, key: str, errors: list[str]):
    if not isinstance(value, str) or value not in allowed:
        errors.append(f"{key} must be one of {', '.join(sorted(allowed))}")
    return value


def _drivers(value, errors: list[str]) -> int:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        errors.append("additionalDrivers must be a non-negative integer")
        return 0
    return value


def _date_range(start_raw, end_raw) -> tuple[datetime, datetime]:
    start = parse_instant(start_raw, "startDate")
    end = parse_instant(end_raw, "endDate")
    if start >= end:
        raise ValidationError("Invalid date range: startDate must be before endDate")
    return start, end


@dataclass
class RentalRequest:
    """Validated input for creating a rental."""
    vehicle_id: str
    start_date: datetime
    end_date: datetime
    pickup_location: str
    dropoff_location: str
    insurance_option: str
    payment_method: str
    additional_drivers: int = 0

    @classmethod
    def from_payload(cls, payload: Optional[dict]) -> "RentalRequest":
        if not isinstance(payload, dict):
            raise ValidationError("Invalid input")

        errors: list[str] = []
        vehicle_id = _required_str(payload, "vehicleId", errors)
        pickup = _required_str(payload, "pickupLocation", errors)
        dropoff = _required_str(payload, "dropoffLocation", errors)
        for key in ("startDate", "endDate", "insuranceOption", "paymentMethod"):
            if payload.get(key) in (None, ""):
                errors.append(f"{key} is required")
        if errors:
            raise ValidationError("Missing required fields", errors)

        start, end = _date_range(payload["startDate"], payload["endDate"])
        insurance = _choice(payload["insuranceOption"], INSURANCE_OPTIONS, "insuranceOption", errors)
        method = _choice(payload["paymentMethod"], PAYMENT_METHODS, "paymentMethod", errors)
        drivers = payload.get("additionalDrivers")
        drivers = 0 if drivers is None else _drivers(drivers, errors)
        if errors:
            raise ValidationError("Validation failed", errors)

        return cls(
            vehicle_id=vehicle_id,
            start_date=start,
            end_date=end,
            pickup_location=pickup,
            dropoff_location=dropoff,
            insurance_option=insurance,
            payment_method=method,
            additional_drivers=drivers,
        )


@dataclass
class RentalPatch:
    """
    The closed set of fields an existing rental accepts. ``None`` means
    "leave unchanged"; anything not listed here is ignored.
    """
    status: Optional[str] = None
    additional_drivers: Optional[int] = None
    insurance_option: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @classmethod
    def from_payload(cls, payload: Optional[dict]) -> "RentalPatch":
        if not isinstance(payload, dict):
            raise ValidationError("Invalid input")

        errors: list[str] = []
        patch = cls()
        if payload.get("status") is not None:
            patch.status = _choice(payload["status"], RentalStatus.ALL, "status", errors)
        if payload.get("additionalDrivers") is not None:
            patch.additional_drivers = _drivers(payload["additionalDrivers"], errors)
        if payload.get("insuranceOption") is not None:
            patch.insurance_option = _choice(payload["insuranceOption"], INSURANCE_OPTIONS,
                                             "insuranceOption", errors)
        if errors:
            raise ValidationError("Validation failed", errors)

        if payload.get("startDate") is not None:
            patch.start_date = parse_instant(payload["startDate"], "startDate")
        if payload.get("endDate") is not None:
            patch.end_date = parse_instant(payload["endDate"], "endDate")

        if patch.is_empty():
            raise ValidationError("No valid updates provided")
        return patch

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    @property
    def changes_dates(self) -> bool:
        return self.start_date is not None or self.end_date is not None
