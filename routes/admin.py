from flask import Blueprint, jsonify, current_app

from models.user import Role
from security.rbac import require_roles, is_admin
from services.errors import Forbidden
from utils.auth_context import token_required, current_email
from utils.audit import log_event

admin_bp = Blueprint("admin", __name__)


def _normalize_email(value: str) -> str:
    return (value or "").strip().lower()


# ---------- role check (callers may ask about themselves; admins about anyone) ----------
@admin_bp.get("/admin/<email>")
@token_required
def check_admin(email: str):
    email = _normalize_email(email)
    if email != (current_email() or "").lower() and not is_admin():
        raise Forbidden()

    user = current_app.extensions["store"].find_user(email)
    return jsonify(admin=bool(user and user.is_admin)), 200


# ---------- ADMIN: promote a user ----------
@admin_bp.put("/user/admin/<email>")
@token_required
@require_roles(Role.ADMIN)
def make_admin(email: str):
    email = _normalize_email(email)
    user = current_app.extensions["store"].set_role(email, Role.ADMIN)
    if not user:
        return jsonify(error="User not found"), 404

    log_event("ADMIN_PROMOTE", actor=current_email(), entity="user", entity_id=user.id, metadata={"email": email})
    return jsonify(user.to_dict()), 200
