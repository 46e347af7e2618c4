from dataclasses import dataclass
from typing import Optional

from carhire.utils.constants import Role


@dataclass
class Principal:
    """
    The authenticated caller of a request. Authentication itself happens
    upstream; we only see the id and role it left in the session.
    """
    user_id: str
    role: str  # "customer" | "admin"

    @property
    def is_admin(self) -> bool:
        return False

    def can_access(self, rental: dict) -> bool:
        """Whether this principal may read or modify the given rental."""
        return rental.get("user_id") == self.user_id


class CustomerPrincipal(Principal):
    """Customers only ever see their own rentals."""


class AdminPrincipal(Principal):
    """Admins can see and change every rental."""

    @property
    def is_admin(self) -> bool:
        return True

    def can_access(self, rental: dict) -> bool:
        return True


def principal_from_session(session) -> Optional[Principal]:
    """Map the session's uid/role to a principal; None when not logged in."""
    uid = session.get("uid")
    if not uid:
        return None
    role = (session.get("role") or "").lower()
    if role == Role.ADMIN:
        return AdminPrincipal(user_id=str(uid), role=role)
    return CustomerPrincipal(user_id=str(uid), role=Role.CUSTOMER)
