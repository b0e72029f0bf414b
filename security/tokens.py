from datetime import datetime, timedelta, timezone

from flask import current_app
from jose import JWTError, jwt


def issue_token(email: str) -> str:
    lifetime = current_app.config.get("ACCESS_TOKEN_LIFETIME_SECONDS", 24 * 60 * 60)
    now = datetime.now(timezone.utc)
    claims = {
        "email": email,
        "iat": now,
        "exp": now + timedelta(seconds=lifetime),
    }
    return jwt.encode(
        claims,
        current_app.config["ACCESS_TOKEN_SECRET"],
        algorithm=current_app.config.get("ACCESS_TOKEN_ALGORITHM", "HS256"),
    )


def decode_token(token: str):
    """
    Returns the claims dict, or None when the signature, expiry or
    payload is not acceptable.
    """
    if not token:
        return None
    try:
        claims = jwt.decode(
            token,
            current_app.config["ACCESS_TOKEN_SECRET"],
            algorithms=[current_app.config.get("ACCESS_TOKEN_ALGORITHM", "HS256")],
        )
    except JWTError:
        return None
    if not isinstance(claims.get("email"), str):
        return None
    return claims
