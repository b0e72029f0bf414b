from functools import wraps
from flask import g, request
from security.tokens import decode_token
from services.errors import Forbidden, Unauthorized

def load_current_identity():
    """
    Reads ``Authorization: Bearer <token>``. Sets g.identity to the decoded
    claims, or None; g.auth_header records whether a header was sent at all.
    """
    header = request.headers.get("Authorization")
    g.auth_header = bool(header)
    g.identity = None
    if not header:
        return
    parts = header.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return
    g.identity = decode_token(parts[1].strip())

def current_email():
    identity = getattr(g, "identity", None)
    return identity.get("email") if identity else None

def token_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not getattr(g, "auth_header", False):
            raise Unauthorized()
        if getattr(g, "identity", None) is None:
            raise Forbidden()
        return fn(*args, **kwargs)
    return wrapper
