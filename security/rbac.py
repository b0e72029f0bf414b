from functools import wraps
from flask import current_app, g

from models.user import Role
from services.errors import Forbidden, Unauthorized
from utils.auth_context import current_email


def caller_role():
    """Role of the authenticated caller, or None when the caller has no account."""
    email = current_email()
    if not email:
        return None
    user = current_app.extensions["store"].find_user(email)
    return user.role_enum if user else None

def is_admin() -> bool:
    return caller_role() is Role.ADMIN

def require_roles(*roles: Role):
    """
    Usage: @require_roles(Role.ADMIN)
    Must sit below @token_required.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if getattr(g, "identity", None) is None:
                raise Unauthorized()

            if caller_role() not in roles:
                raise Forbidden("Forbidden request")

            return fn(*args, **kwargs)
        return wrapper
    return decorator
