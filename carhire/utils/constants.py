# carhire/utils/constants.py

"""
Global constants for roles, statuses, and allowed enum values.
These constants are imported by both models and services.
"""

SERVICE_INTERVAL_DAYS = 90
MAX_IMAGES = 10


class Role:
    CUSTOMER = "customer"
    ADMIN = "admin"


class RentalStatus:
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    ALL = frozenset({PENDING, ACTIVE, COMPLETED, CANCELLED})
    # Statuses that hold the vehicle for their [start, end) window
    BLOCKING = frozenset({PENDING, ACTIVE})
    TERMINAL = frozenset({COMPLETED, CANCELLED})


class PaymentStatus:
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"

    ALL = frozenset({PENDING, PAID, REFUNDED})


INSURANCE_OPTIONS = frozenset({"basic", "premium", "full"})
PAYMENT_METHODS = frozenset({"creditCard", "debitCard", "paypal"})

FUEL_TYPES = frozenset({"gasoline", "diesel", "electric", "hybrid"})
TRANSMISSIONS = frozenset({"automatic", "manual"})
CATEGORIES = frozenset({"economy", "midsize", "luxury", "suv", "van"})
