"""
State machine for Rental.status: pending -> active -> completed, and
cancellation from pending or active. Terminal states never move.
"""
from datetime import datetime

import pytest
import pytz

from carhire.exceptions import InvalidTransitionError, ValidationError
from carhire.models.rental import Rental, RentalPatch, RentalRequest


def make_rental(status):
    return Rental(
        rental_id="r1",
        user_id="u1",
        vehicle_id="v1",
        start_date=datetime(2024, 6, 1, tzinfo=pytz.utc),
        end_date=datetime(2024, 6, 4, 12, tzinfo=pytz.utc),
        total_cost=200.0,
        pickup_location="Airport",
        dropoff_location="Downtown",
        insurance_option="basic",
        payment_method="paypal",
        status=status,
    )


@pytest.mark.parametrize("status", ["pending", "active"])
def test_cancel_allowed(status):
    r = make_rental(status)
    r.cancel()
    assert r.status == "cancelled"


@pytest.mark.parametrize("status", ["completed", "cancelled"])
def test_cancel_refused_from_terminal(status):
    r = make_rental(status)
    with pytest.raises(InvalidTransitionError):
        r.cancel()
    assert r.status == status


def test_complete_only_from_active():
    r = make_rental("active")
    r.complete()
    assert r.status == "completed"

    for status in ("pending", "completed", "cancelled"):
        with pytest.raises(InvalidTransitionError):
            make_rental(status).complete()


def test_transition_table():
    assert make_rental("pending").can_transition_to("active")
    assert not make_rental("pending").can_transition_to("completed")
    assert not make_rental("completed").can_transition_to("active")

    r = make_rental("pending")
    r.transition_to("active")
    assert r.is_active

    with pytest.raises(InvalidTransitionError):
        make_rental("pending").transition_to("completed")
    with pytest.raises(ValidationError):
        make_rental("pending").transition_to("lost")


def test_duration_rounds_up():
    assert make_rental("pending").duration == 4


def test_request_rejects_inverted_dates_before_anything_else():
    payload = {
        "vehicleId": "v1", "startDate": "2024-06-04", "endDate": "2024-06-01",
        "pickupLocation": "A", "dropoffLocation": "B",
        "insuranceOption": "bogus", "paymentMethod": "cash",
    }
    with pytest.raises(ValidationError, match="date range"):
        RentalRequest.from_payload(payload)


def test_request_lists_missing_fields():
    with pytest.raises(ValidationError) as exc:
        RentalRequest.from_payload({"vehicleId": "v1"})
    assert "pickupLocation is required" in exc.value.errors
    assert "paymentMethod is required" in exc.value.errors


def test_patch_ignores_unknown_fields_and_rejects_empty():
    with pytest.raises(ValidationError, match="No valid updates"):
        RentalPatch.from_payload({"vehicleId": "other", "totalCost": 0})

    patch = RentalPatch.from_payload({"additionalDrivers": 2, "totalCost": 0})
    assert patch.additional_drivers == 2
    assert not patch.changes_dates


@pytest.mark.parametrize("payload", [
    {"additionalDrivers": -1},
    {"additionalDrivers": True},
    {"insuranceOption": "gold"},
    {"status": "lost"},
])
def test_patch_field_validators(payload):
    with pytest.raises(ValidationError):
        RentalPatch.from_payload(payload)


@pytest.mark.parametrize("key", ["insuranceOption", "paymentMethod"])
@pytest.mark.parametrize("value", [["basic"], {"a": 1}])
def test_request_rejects_non_string_choices(key, value):
    payload = {
        "vehicleId": "v1", "startDate": "2030-06-01", "endDate": "2030-06-04",
        "pickupLocation": "A", "dropoffLocation": "B",
        "insuranceOption": "basic", "paymentMethod": "paypal",
    }
    payload[key] = value
    with pytest.raises(ValidationError) as exc:
        RentalRequest.from_payload(payload)
    assert any(key in e for e in exc.value.errors)


@pytest.mark.parametrize("payload", [
    {"status": {"a": 1}},
    {"status": ["active"]},
    {"insuranceOption": ["full"]},
])
def test_patch_rejects_non_string_choices(payload):
    with pytest.raises(ValidationError):
        RentalPatch.from_payload(payload)
