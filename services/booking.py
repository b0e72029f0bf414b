import logging
from dataclasses import dataclass

from models.booking import Booking
from services.errors import ValidationError

logger = logging.getLogger(__name__)

# request field -> column
REQUIRED_FIELDS = {
    "treatment": "treatment",
    "date": "date",
    "slot": "slot",
    "patient": "patient",
    "patientName": "patient_name",
}


@dataclass
class BookingResult:
    created: bool
    booking: Booking


def parse_booking_request(data: dict) -> dict:
    """Map the JSON request onto booking columns, rejecting missing or blank fields."""
    fields = {}
    missing = []
    for key, column in REQUIRED_FIELDS.items():
        value = data.get(key)
        if not isinstance(value, str) or not value.strip():
            missing.append(key)
            continue
        # date is an opaque key; availability matches it verbatim
        fields[column] = value if key == "date" else value.strip()
    if missing:
        raise ValidationError("Missing required booking fields", fields=missing)
    fields["patient"] = fields["patient"].lower()
    return fields


class BookingWorkflow:
    """
    Creates at most one booking per (treatment, date, patient).

    The requested slot is checked against the treatment's template but not
    against other patients' bookings: availability is advisory and two
    patients may hold the same slot (soft-booking).
    """

    def __init__(self, store, notifier):
        self.store = store
        self.notifier = notifier

    def create_booking(self, data: dict) -> BookingResult:
        fields = parse_booking_request(data or {})

        service = self.store.find_service(fields["treatment"])
        if service is None:
            raise ValidationError("Unknown treatment")
        if fields["slot"] not in (service.slots or []):
            raise ValidationError("Slot is not offered for this treatment")

        booking, created = self.store.insert_booking_if_absent(fields)
        if not created:
            logger.info("Duplicate booking request for booking %s", booking.id)
            return BookingResult(created=False, booking=booking)

        self.notifier.appointment_booked(booking.to_dict())
        return BookingResult(created=True, booking=booking)
