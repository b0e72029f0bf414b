from flask import Blueprint, request, jsonify, current_app

from utils.auth_context import token_required, current_email
from utils.audit import log_event

payments_bp = Blueprint("payments", __name__)


@payments_bp.post("/create-payment-intent")
@token_required
def create_payment_intent():
    data = request.get_json(silent=True) or {}
    price = data.get("price")

    client_secret = current_app.extensions["charges"].create_payment_intent(price)

    log_event("PAYMENT_INTENT_CREATE", actor=current_email(), entity="payment", metadata={"price": price})
    return jsonify(clientSecret=client_secret), 200
