from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from models.booking import Booking
from services.booking import BookingWorkflow, parse_booking_request
from services.errors import ValidationError
from services.notifications import APPOINTMENT_BOOKED
from tests.conftest import booking_payload


def _workflow(app):
    return BookingWorkflow(app.extensions["store"], app.extensions["notifier"])


class TestParseBookingRequest:
    def test_maps_fields_to_columns(self):
        fields = parse_booking_request(booking_payload(patient=" A@X.com "))

        assert fields == {
            "treatment": "Cleaning",
            "date": "2024-01-05",
            "slot": "10am",
            "patient": "a@x.com",
            "patient_name": "Alice",
        }

    def test_date_is_kept_verbatim(self):
        fields = parse_booking_request(booking_payload(date=" Jan 5, 2024 "))

        assert fields["date"] == " Jan 5, 2024 "

    def test_lists_every_missing_field(self):
        with pytest.raises(ValidationError) as info:
            parse_booking_request({"treatment": "Cleaning", "slot": "  "})

        assert info.value.details["fields"] == ["date", "slot", "patient", "patientName"]

    def test_rejects_non_string_values(self):
        with pytest.raises(ValidationError):
            parse_booking_request(booking_payload(date=20240105))


class TestCreateBooking:
    def test_first_request_creates_and_notifies(self, client, notifier):
        resp = client.post("/booking", json=booking_payload())

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["created"] is True
        assert body["booking"]["paid"] is False
        assert body["booking"]["transactionId"] is None

        sent = notifier.of_kind(APPOINTMENT_BOOKED)
        assert len(sent) == 1
        assert sent[0]["patient"] == "a@x.com"
        assert sent[0]["slot"] == "10am"
        assert sent[0]["treatment"] == "Cleaning"

    def test_resubmission_returns_existing_booking(self, client, notifier):
        first = client.post("/booking", json=booking_payload()).get_json()["booking"]

        resp = client.post("/booking", json=booking_payload())

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["created"] is False
        assert body["success"] is False
        assert body["booking"] == first
        assert len(notifier.of_kind(APPOINTMENT_BOOKED)) == 1

    def test_identity_ignores_slot(self, client):
        client.post("/booking", json=booking_payload(slot="9am"))

        body = client.post("/booking", json=booking_payload(slot="10am")).get_json()

        assert body["created"] is False
        assert body["booking"]["slot"] == "9am"

    def test_same_patient_other_day_is_new_booking(self, client):
        client.post("/booking", json=booking_payload())

        resp = client.post("/booking", json=booking_payload(date="2024-01-06"))

        assert resp.status_code == 201

    def test_two_patients_may_hold_the_same_slot(self, client):
        a = client.post("/booking", json=booking_payload(patient="a@x.com"))
        b = client.post("/booking", json=booking_payload(patient="b@x.com"))

        assert a.status_code == 201
        assert b.status_code == 201

    def test_missing_fields_rejected_without_write(self, app, client, notifier):
        resp = client.post("/booking", json={"treatment": "Cleaning"})

        assert resp.status_code == 400
        assert set(resp.get_json()["fields"]) == {"date", "slot", "patient", "patientName"}
        with app.app_context():
            assert Booking.query.count() == 0
        assert notifier.sent == []

    def test_unknown_treatment_rejected(self, client):
        resp = client.post("/booking", json=booking_payload(treatment="Surgery"))

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Unknown treatment"

    def test_slot_outside_template_rejected(self, client):
        resp = client.post("/booking", json=booking_payload(slot="11am"))

        assert resp.status_code == 400

    def test_audit_trail_records_create_and_duplicate(self, app, client, store):
        client.post("/booking", json=booking_payload())
        client.post("/booking", json=booking_payload())

        with app.app_context():
            actions = [r.action for r in store.list_audit_logs()]
        assert "BOOKING_CREATE" in actions
        assert "BOOKING_DUPLICATE" in actions


class TestBookingRaces:
    def test_insert_losing_the_race_reports_existing(self, app, store, monkeypatch):
        with app.app_context():
            winner = _workflow(app).create_booking(booking_payload())
            winner_id = winner.booking.id

            # a stale read: the pre-check misses the row another request just wrote
            monkeypatch.setattr(store, "find_booking", lambda *args: None)
            result = _workflow(app).create_booking(booking_payload())

            assert result.created is False
            assert result.booking.id == winner_id
            assert Booking.query.count() == 1

    def test_concurrent_requests_create_exactly_one(self, app, notifier):
        def attempt(_):
            with app.app_context():
                result = _workflow(app).create_booking(booking_payload())
                return result.created, result.booking.id

        with ThreadPoolExecutor(max_workers=8) as executor:
            outcomes = list(executor.map(attempt, range(8)))

        created = [o for o in outcomes if o[0]]
        assert len(created) == 1
        assert len({booking_id for _, booking_id in outcomes}) == 1
        assert len(notifier.of_kind(APPOINTMENT_BOOKED)) == 1


class TestReadBookings:
    def test_patient_lists_own_bookings(self, client, auth):
        client.post("/booking", json=booking_payload())
        client.post("/booking", json=booking_payload(patient="b@x.com"))

        resp = client.get("/booking", query_string={"patient": "a@x.com"}, headers=auth("a@x.com"))

        assert resp.status_code == 200
        assert [b["patient"] for b in resp.get_json()] == ["a@x.com"]

    def test_other_patients_bookings_are_refused(self, client, auth):
        client.post("/booking", json=booking_payload(patient="b@x.com"))

        resp = client.get("/booking", query_string={"patient": "b@x.com"}, headers=auth("a@x.com"))

        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Bad Request"}

    def test_listing_requires_bearer(self, client):
        resp = client.get("/booking", query_string={"patient": "a@x.com"})

        assert resp.status_code == 401

    def test_invalid_token_is_forbidden(self, client):
        resp = client.get(
            "/booking",
            query_string={"patient": "a@x.com"},
            headers={"Authorization": "Bearer not-a-token"},
        )

        assert resp.status_code == 403

    def test_fetch_single_booking(self, client, auth):
        booking = client.post("/booking", json=booking_payload()).get_json()["booking"]

        resp = client.get(f"/booking/{booking['id']}", headers=auth("a@x.com"))

        assert resp.status_code == 200
        assert resp.get_json()["id"] == booking["id"]

    def test_fetch_unknown_booking(self, client, auth):
        resp = client.get("/booking/999", headers=auth("a@x.com"))

        assert resp.status_code == 404


class TestAuditFailureAfterCommit:
    def test_created_booking_still_returns_created(self, app, client, monkeypatch):
        def broken_audit(*args, **kwargs):
            raise OperationalError("INSERT INTO audit_logs", {}, Exception("disk I/O error"))

        monkeypatch.setattr("routes.booking.log_event", broken_audit)

        resp = client.post("/booking", json=booking_payload())

        assert resp.status_code == 201
        assert resp.get_json()["created"] is True
        with app.app_context():
            assert Booking.query.count() == 1

    def test_duplicate_still_returns_existing(self, client, monkeypatch):
        first = client.post("/booking", json=booking_payload()).get_json()["booking"]

        monkeypatch.setattr(
            "routes.booking.log_event",
            Mock(side_effect=OperationalError("INSERT INTO audit_logs", {}, Exception("locked"))),
        )
        resp = client.post("/booking", json=booking_payload())

        assert resp.status_code == 200
        assert resp.get_json()["booking"]["id"] == first["id"]
