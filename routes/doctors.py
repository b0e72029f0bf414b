from flask import Blueprint, request, jsonify, current_app

from models.user import Role
from security.rbac import require_roles
from utils.auth_context import token_required, current_email
from utils.audit import log_event

doctors_bp = Blueprint("doctors", __name__)


@doctors_bp.post("/doctor")
@token_required
@require_roles(Role.ADMIN)
def add_doctor():
    data = request.get_json(silent=True) or {}
    name = (data.get("name") or "").strip()
    email = (data.get("email") or "").strip().lower()
    specialty = (data.get("specialty") or "").strip() or None
    img = (data.get("img") or "").strip() or None

    if not name or not email:
        return jsonify(error="name and email are required"), 400

    doctor, created = current_app.extensions["store"].add_doctor(
        {"name": name, "email": email, "specialty": specialty, "img": img}
    )
    if not created:
        return jsonify(error="Doctor email already exists"), 409

    log_event("DOCTOR_CREATE", actor=current_email(), entity="doctor", entity_id=doctor.id)
    return jsonify(doctor.to_dict()), 201


@doctors_bp.get("/doctors")
@token_required
@require_roles(Role.ADMIN)
def list_doctors():
    doctors = current_app.extensions["store"].list_doctors()
    return jsonify([d.to_dict() for d in doctors]), 200


@doctors_bp.delete("/doctor/<email>")
@token_required
@require_roles(Role.ADMIN)
def delete_doctor(email: str):
    email = (email or "").strip().lower()
    if not current_app.extensions["store"].delete_doctor(email):
        return jsonify(error="Doctor not found"), 404

    log_event("DOCTOR_DELETE", actor=current_email(), entity="doctor", metadata={"email": email})
    return jsonify(deleted=True), 200
