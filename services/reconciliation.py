"""
Payment reconciliation.

Ties a completed payment to its booking:

1. append the payment to the log (one row per transaction id)
2. flip the booking to paid, only if it is still unpaid
3. read the booking back
4. send the payment confirmation, only when step 2 flipped the flag

Both writes are idempotent, so a client may simply repeat the call after
any failure. A failure between 1 and 2 is reported as
ReconciliationInconsistent because money is already on record.
"""
import logging

from services.errors import (
    AlreadyPaid,
    NotFound,
    ReconciliationInconsistent,
    StoreUnavailable,
    ValidationError,
)

logger = logging.getLogger(__name__)


def parse_payment_info(data: dict):
    transaction_id = data.get("transactionId")
    if not isinstance(transaction_id, str) or not transaction_id.strip():
        raise ValidationError("transactionId required")

    amount = data.get("amount", data.get("price"))
    if isinstance(amount, bool) or not isinstance(amount, (int, float)) or amount < 0:
        raise ValidationError("amount must be a non-negative number")

    return transaction_id.strip(), float(amount)


class PaymentReconciler:
    def __init__(self, store, notifier):
        self.store = store
        self.notifier = notifier

    def confirm_payment(self, booking_id: int, data: dict):
        transaction_id, amount = parse_payment_info(data or {})

        booking = self.store.get_booking(booking_id)
        if booking is None:
            raise NotFound("Booking not found")

        if booking.paid and booking.transaction_id != transaction_id:
            raise AlreadyPaid(transactionId=booking.transaction_id)

        # (a) any failure here leaves nothing behind; StoreUnavailable propagates as retryable
        payment, recorded = self.store.record_payment(booking, transaction_id, amount)
        if not recorded:
            if payment.booking_id != booking_id:
                raise ValidationError("transactionId already settled another booking")
            logger.info("Payment %s already on record, skipping insert", transaction_id)

        # (b)
        try:
            flipped = self.store.mark_booking_paid(booking_id, transaction_id)
        except StoreUnavailable as exc:
            logger.error(
                "Payment %s recorded but booking %s not marked paid: %s",
                transaction_id, booking_id, exc,
            )
            raise ReconciliationInconsistent(bookingId=booking_id, transactionId=transaction_id) from exc

        # (c)
        updated = self.store.get_booking(booking_id)
        if not flipped and updated.transaction_id != transaction_id:
            # lost a race against a different transaction for the same booking
            logger.error(
                "Booking %s settled by %s; payment %s logged without credit",
                booking_id, updated.transaction_id, transaction_id,
            )
            raise AlreadyPaid(transactionId=updated.transaction_id)

        # (d)
        if flipped:
            info = updated.to_dict()
            info["transactionId"] = transaction_id
            info["price"] = payment.amount
            self.notifier.payment_confirmed(info)
        return updated
