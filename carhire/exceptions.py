"""
Custom exception classes for the car hire backend.

Services raise these; the error handlers registered in ``create_app`` turn
them into JSON responses using each class's ``status_code``.
"""


class CarHireError(Exception):
    """Base class for every failure the application reports to callers."""

    status_code = 500
    default_message = "Error: internal error"

    def __init__(self, message: str | None = None, errors: list[str] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = list(errors or [])
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class ValidationError(CarHireError):
    """Raised for malformed or missing input, including an invalid date range."""

    status_code = 400
    default_message = "Error: invalid input"


class NotFoundError(CarHireError):
    """Raised when a referenced entity does not exist."""

    status_code = 404
    default_message = "Error: not found"


class VehicleNotFoundError(NotFoundError):
    """Raised when a vehicle ID cannot be found in the system."""

    default_message = "Error: vehicle not found"


class RentalNotFoundError(NotFoundError):
    """Raised when a rental record cannot be found in the system."""

    default_message = "Error: rental not found"


class ConflictError(CarHireError):
    """Raised when a booking overlaps an existing one or a unique field is taken."""

    status_code = 409
    default_message = "Error: conflict"


class InvalidTransitionError(CarHireError):
    """Raised when a rental status change is not allowed from its current status."""

    status_code = 400
    default_message = "Error: invalid status transition"


class AuthorizationError(CarHireError):
    """Raised when the principal lacks the role or ownership for an operation."""

    status_code = 403
    default_message = "Error: forbidden"


class AuthenticationError(CarHireError):
    """Raised when a request carries no principal at all."""

    status_code = 401
    default_message = "Error: unauthorized"


class StoreError(CarHireError):
    """Raised when the backing store cannot be read or written."""

    status_code = 500
    default_message = "Error: storage failure"
