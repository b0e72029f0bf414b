"""
Store adapter.

Every read and write the portal performs goes through :class:`Store`, so the
workflows never build queries themselves. Transient database failures surface
as :class:`~services.errors.StoreUnavailable`; uniqueness races are resolved
here by re-reading the row that won.
"""
import logging
from contextlib import contextmanager

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db
from models.audit_log import AuditLog
from models.booking import Booking
from models.doctor import Doctor
from models.payment import Payment
from models.service import Service
from models.user import User, Role
from services.errors import StoreUnavailable

logger = logging.getLogger(__name__)


@contextmanager
def _guard(action: str):
    try:
        yield
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.warning("Store operation %s failed: %s", action, exc)
        raise StoreUnavailable() from exc


class Store:
    def __init__(self, app=None):
        self.app = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        db.init_app(app)
        app.extensions["store"] = self
        self.app = app

    def create_all(self):
        with self.app.app_context():
            db.create_all()

    def close(self):
        with self.app.app_context():
            db.session.remove()
            db.engine.dispose()

    # ---------- services ----------
    def find_service_catalog(self):
        with _guard("find_service_catalog"):
            return Service.query.order_by(Service.id.asc()).all()

    def find_service(self, name: str):
        with _guard("find_service"):
            return Service.query.filter_by(name=name).first()

    def add_services(self, catalog):
        """Insert catalog entries whose name is not present yet. Returns the count added."""
        with _guard("add_services"):
            existing = {s.name for s in Service.query.all()}
            added = 0
            for entry in catalog:
                if entry["name"] in existing:
                    continue
                db.session.add(Service(name=entry["name"], slots=list(entry["slots"]), price=entry.get("price", 0)))
                added += 1
            db.session.commit()
            return added

    # ---------- bookings ----------
    def find_bookings_for_date(self, date: str):
        with _guard("find_bookings_for_date"):
            return Booking.query.filter_by(date=date).all()

    def find_bookings_for_patient(self, patient: str):
        with _guard("find_bookings_for_patient"):
            return Booking.query.filter_by(patient=patient).order_by(Booking.created_at.desc()).all()

    def find_booking(self, treatment: str, date: str, patient: str):
        with _guard("find_booking"):
            return Booking.query.filter_by(treatment=treatment, date=date, patient=patient).first()

    def get_booking(self, booking_id: int):
        with _guard("get_booking"):
            return db.session.get(Booking, booking_id)

    def insert_booking_if_absent(self, fields: dict):
        """
        Returns (booking, created). The unique (treatment, date, patient)
        constraint decides between concurrent inserts for the same key.
        """
        existing = self.find_booking(fields["treatment"], fields["date"], fields["patient"])
        if existing:
            return existing, False

        booking = Booking(**fields, paid=False)
        with _guard("insert_booking"):
            db.session.add(booking)
            try:
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                winner = Booking.query.filter_by(
                    treatment=fields["treatment"], date=fields["date"], patient=fields["patient"]
                ).first()
                if winner is None:
                    raise
                return winner, False
        return booking, True

    # ---------- payments ----------
    def find_payment(self, transaction_id: str):
        with _guard("find_payment"):
            return Payment.query.filter_by(transaction_id=transaction_id).first()

    def record_payment(self, booking, transaction_id: str, amount: float):
        """
        Append one payment row per transaction id. Returns (payment, created);
        a replayed transaction id returns the stored row with created=False.
        """
        existing = self.find_payment(transaction_id)
        if existing:
            return existing, False

        payment = Payment(
            booking_id=booking.id,
            transaction_id=transaction_id,
            amount=amount,
            treatment=booking.treatment,
            date=booking.date,
            slot=booking.slot,
            patient=booking.patient,
            patient_name=booking.patient_name,
        )
        with _guard("record_payment"):
            db.session.add(payment)
            try:
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                winner = Payment.query.filter_by(transaction_id=transaction_id).first()
                if winner is None:
                    raise
                return winner, False
        return payment, True

    def mark_booking_paid(self, booking_id: int, transaction_id: str) -> bool:
        """Set paid/transaction_id only while unpaid. True if this call flipped the flag."""
        with _guard("mark_booking_paid"):
            result = db.session.execute(
                update(Booking)
                .where(Booking.id == booking_id, Booking.paid.is_(False))
                .values(paid=True, transaction_id=transaction_id)
                .execution_options(synchronize_session=False)
            )
            db.session.commit()
            return result.rowcount == 1

    # ---------- users ----------
    def find_user(self, email: str):
        with _guard("find_user"):
            return User.query.filter_by(email=email).first()

    def list_users(self):
        with _guard("list_users"):
            return User.query.order_by(User.created_at.asc()).all()

    def upsert_user(self, email: str, name=None):
        """Returns (user, created). Never touches the role column."""
        with _guard("upsert_user"):
            user = User.query.filter_by(email=email).first()
            created = user is None
            if created:
                user = User(email=email)
                db.session.add(user)
            if name is not None:
                user.name = name
            try:
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                user = User.query.filter_by(email=email).first()
                if user is None:
                    raise
                created = False
        return user, created

    def set_role(self, email: str, role: Role):
        with _guard("set_role"):
            user = User.query.filter_by(email=email).first()
            if not user:
                return None
            user.role = role.value
            db.session.commit()
            return user

    # ---------- doctors ----------
    def list_doctors(self):
        with _guard("list_doctors"):
            return Doctor.query.order_by(Doctor.created_at.asc()).all()

    def add_doctor(self, fields: dict):
        """Returns (doctor, created); created is False when the email is taken."""
        doctor = Doctor(**fields)
        with _guard("add_doctor"):
            db.session.add(doctor)
            try:
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                return Doctor.query.filter_by(email=fields["email"]).first(), False
        return doctor, True

    def delete_doctor(self, email: str) -> bool:
        with _guard("delete_doctor"):
            deleted = Doctor.query.filter_by(email=email).delete()
            db.session.commit()
            return deleted > 0

    # ---------- audit ----------
    def list_audit_logs(self, limit: int = 200, action=None):
        with _guard("list_audit_logs"):
            q = AuditLog.query
            if action:
                q = q.filter(AuditLog.action == action)
            return q.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()
