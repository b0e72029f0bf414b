from flask import Blueprint, request, jsonify, current_app

from models.user import Role
from security.rbac import require_roles
from security.tokens import issue_token
from utils.auth_context import token_required
from utils.audit import log_event

users_bp = Blueprint("users", __name__)


def _normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def _is_valid_email(email: str) -> bool:
    return isinstance(email, str) and "@" in email and len(email) <= 255


# ---------- sign-in bootstrap: insert or update the user, hand out a token ----------
@users_bp.put("/user/<email>")
def upsert_user(email: str):
    email = _normalize_email(email)
    if not _is_valid_email(email):
        return jsonify(error="Invalid email"), 400

    data = request.get_json(silent=True) or {}
    name = data.get("name")
    if name is not None and (not isinstance(name, str) or len(name.strip()) > 120):
        return jsonify(error="Invalid name"), 400

    # role is deliberately not read from the body; promotion goes through /user/admin/<email>
    user, created = current_app.extensions["store"].upsert_user(email, name.strip() if name else None)

    log_event("USER_UPSERT", actor=email, entity="user", entity_id=user.id, metadata={"created": created})
    return jsonify(result={"created": created, "user": user.to_dict()}, token=issue_token(email)), 200


@users_bp.get("/all-user")
@token_required
@require_roles(Role.ADMIN)
def all_users():
    users = current_app.extensions["store"].list_users()
    return jsonify([u.to_dict() for u in users]), 200
