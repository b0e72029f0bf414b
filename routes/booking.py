import logging

from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError

from services.booking import BookingWorkflow
from services.errors import ReconciliationInconsistent
from services.reconciliation import PaymentReconciler
from models import db
from utils.auth_context import token_required, current_email
from utils.audit import log_event

booking_bp = Blueprint("booking", __name__)
logger = logging.getLogger(__name__)

def _store():
    return current_app.extensions["store"]

def _notifier():
    return current_app.extensions["notifier"]

def _audit(action, **kwargs):
    """Runs after the business write committed; failures are logged, not raised."""
    try:
        log_event(action, **kwargs)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Could not write audit event %s for %s %s", action, kwargs.get("entity"), kwargs.get("entity_id"))


# ---------- PATIENTS: book a treatment slot (IDEMPOTENT) ----------
@booking_bp.post("/booking")
def create_booking():
    data = request.get_json(silent=True) or {}
    result = BookingWorkflow(_store(), _notifier()).create_booking(data)
    booking = result.booking

    if not result.created:
        _audit("BOOKING_DUPLICATE", actor=booking.patient, entity="booking", entity_id=booking.id)
        return jsonify(success=False, created=False, booking=booking.to_dict()), 200

    _audit(
        "BOOKING_CREATE",
        actor=booking.patient,
        entity="booking",
        entity_id=booking.id,
        metadata={"treatment": booking.treatment, "date": booking.date, "slot": booking.slot},
    )
    return jsonify(success=True, created=True, booking=booking.to_dict()), 201


# ---------- PATIENTS: view my bookings ----------
@booking_bp.get("/booking")
@token_required
def my_bookings():
    patient = (request.args.get("patient") or "").strip().lower()
    if not patient or patient != (current_email() or "").lower():
        return jsonify(error="Bad Request"), 400

    rows = _store().find_bookings_for_patient(patient)
    return jsonify([b.to_dict() for b in rows]), 200


# ---------- fetch one booking (payment page) ----------
@booking_bp.get("/booking/<int:booking_id>")
@token_required
def get_booking(booking_id: int):
    booking = _store().get_booking(booking_id)
    if not booking:
        return jsonify(error="Booking not found"), 404
    return jsonify(booking.to_dict()), 200


# ---------- payment completed: reconcile ----------
@booking_bp.patch("/booking/<int:booking_id>")
def confirm_payment(booking_id: int):
    data = request.get_json(silent=True) or {}
    try:
        booking = PaymentReconciler(_store(), _notifier()).confirm_payment(booking_id, data)
    except ReconciliationInconsistent:
        db.session.rollback()
        _audit(
            "PAYMENT_RECONCILE_INCONSISTENT",
            entity="booking",
            entity_id=booking_id,
            metadata={"transactionId": data.get("transactionId")},
        )
        raise

    _audit(
        "PAYMENT_RECONCILED",
        actor=booking.patient,
        entity="booking",
        entity_id=booking.id,
        metadata={"transactionId": booking.transaction_id},
    )
    return jsonify(booking.to_dict()), 200
