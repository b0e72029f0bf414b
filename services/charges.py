import logging

import stripe

from services.errors import ChargeFailed, ValidationError

logger = logging.getLogger(__name__)


class ChargeService:
    """Creates Stripe payment intents; the client finishes the charge with the secret."""

    def __init__(self, app=None):
        self.api_key = None
        self.currency = "usd"
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.api_key = app.config.get("STRIPE_SECRET_KEY")
        self.currency = app.config.get("PAYMENT_CURRENCY", "usd")
        app.extensions["charges"] = self

    def create_payment_intent(self, price) -> str:
        if isinstance(price, bool) or not isinstance(price, (int, float)) or price <= 0:
            raise ValidationError("price must be a positive number")
        if not self.api_key:
            raise ChargeFailed("Stripe secret key missing (STRIPE_SECRET_KEY)")

        # Stripe expects the smallest currency unit
        amount = int(round(price * 100))
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=self.currency,
                payment_method_types=["card"],
                api_key=self.api_key,
            )
        except stripe.StripeError as exc:
            logger.warning("Stripe payment intent failed: %s", exc)
            raise ChargeFailed() from exc
        return intent["client_secret"]
