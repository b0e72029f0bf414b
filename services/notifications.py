"""
Outbound patient notifications.

Workflows hand a plain dict to the notifier and return immediately; delivery
happens on a small thread pool. Delivery errors are logged here and never
reach the request that triggered them.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial

from flask import current_app

from utils.emailer import send_email

logger = logging.getLogger(__name__)

APPOINTMENT_BOOKED = "appointment_booked"
PAYMENT_CONFIRMED = "payment_confirmed"


def appointment_message(booking: dict) -> dict:
    date, slot, treatment = booking.get("date"), booking.get("slot"), booking.get("treatment")
    reminder_url = current_app.config.get("REMINDER_URL")
    return {
        "to_email": booking.get("patient"),
        "to_name": booking.get("patientName"),
        "subject": f"You have booked an appointment on {date}",
        "body": f"You have booked an appointment on {date} treatment is {treatment}. Time: {slot}",
        "html": (
            f"<h2>Hello {booking.get('patientName')}, you have an appointment on {date} treatment is {treatment}</h2>"
            f"<h5>Please add to your calendar this time {slot}</h5>"
            f'<a href="{reminder_url}">for reminder mail click here</a>'
        ),
    }


def payment_message(info: dict) -> dict:
    date, slot, treatment = info.get("date"), info.get("slot"), info.get("treatment")
    name = info.get("patientName")
    reminder_url = current_app.config.get("REMINDER_URL")
    return {
        "to_email": info.get("patient"),
        "to_name": name,
        "subject": f"Payment is success for an appointment on {date}",
        "body": (
            f"Payment is success for an appointment on {date} treatment is {treatment}. "
            f"Transaction id {info.get('transactionId')}, price {info.get('price')}"
        ),
        "html": (
            f"<h2>Hello {name}, you have an appointment on {date} {slot}.</h2>"
            f"<li>your transaction id {info.get('transactionId')}</li>"
            f"<li>Service price {info.get('price')}</li>"
            f"<h5>Please add to your calendar this date</h5>"
            f'<a href="{reminder_url}">for reminder mail click here</a>'
        ),
    }


_BUILDERS = {
    APPOINTMENT_BOOKED: appointment_message,
    PAYMENT_CONFIRMED: payment_message,
}


class Notifier:
    def __init__(self, app=None, send=send_email):
        self.app = None
        self._send = send
        self._executor = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.app = app
        self._executor = ThreadPoolExecutor(
            max_workers=app.config.get("NOTIFY_MAX_WORKERS", 4),
            thread_name_prefix="notify",
        )
        app.extensions["notifier"] = self

    def shutdown(self, wait: bool = True):
        if self._executor is not None:
            self._executor.shutdown(wait=wait)

    def appointment_booked(self, booking: dict):
        return self.dispatch(APPOINTMENT_BOOKED, booking)

    def payment_confirmed(self, info: dict):
        return self.dispatch(PAYMENT_CONFIRMED, info)

    def dispatch(self, kind: str, payload: dict):
        """Queue a notification and return its future without waiting on it."""
        try:
            future = self._executor.submit(self._deliver, kind, dict(payload))
        except RuntimeError as exc:
            # executor already shut down
            logger.error("Notification %s to %s not queued: %s", kind, payload.get("patient"), exc)
            return None
        future.add_done_callback(partial(self._report, kind, payload.get("patient")))
        return future

    def _deliver(self, kind: str, payload: dict):
        with self.app.app_context():
            message = _BUILDERS[kind](payload)
            return self._send(**message)

    @staticmethod
    def _report(kind: str, recipient, future):
        exc = future.exception()
        if exc is not None:
            logger.error("Notification %s to %s crashed: %s", kind, recipient, exc)
            return
        ok, error = future.result()
        if ok:
            logger.info("Notification %s sent to %s", kind, recipient)
        else:
            logger.warning("Notification %s to %s not sent: %s", kind, recipient, error)
