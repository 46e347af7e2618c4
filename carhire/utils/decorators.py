from functools import wraps

from flask import g, session

from carhire.exceptions import AuthenticationError, AuthorizationError
from carhire.models.user import principal_from_session


def login_required(fn):
    """Resolve the session principal into ``g.principal`` or fail with 401."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        principal = principal_from_session(session)
        if principal is None:
            raise AuthenticationError("Unauthorized")
        g.principal = principal
        return fn(*args, **kwargs)

    return wrapper


def role_required(*roles):
    """Must sit under ``login_required``."""
    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if g.principal.role not in roles:
                raise AuthorizationError("Forbidden: insufficient permission")
            return fn(*args, **kwargs)

        return wrapper

    return deco
