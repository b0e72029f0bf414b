from flask import Blueprint, current_app, jsonify, request

from services.availability import AvailabilityEngine

availability_bp = Blueprint("availability", __name__)


@availability_bp.get("/available")
def available():
    # date is an opaque key matched verbatim against bookings (e.g. "Jan 5, 2024")
    date = request.args.get("date", "")
    engine = AvailabilityEngine(current_app.extensions["store"])
    return jsonify(engine.compute_availability(date)), 200


@availability_bp.get("/services")
def list_services():
    services = current_app.extensions["store"].find_service_catalog()
    return jsonify([{"id": s.id, "name": s.name} for s in services]), 200
