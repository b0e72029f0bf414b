from datetime import datetime
from models.db import db

class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)

    treatment = db.Column(db.String(120), nullable=False, index=True)
    date = db.Column(db.String(40), nullable=False, index=True)  # opaque day key, e.g. "Jan 5, 2024"
    slot = db.Column(db.String(60), nullable=False)

    patient = db.Column(db.String(255), nullable=False, index=True)  # email
    patient_name = db.Column(db.String(120), nullable=False)

    paid = db.Column(db.Boolean, nullable=False, default=False)
    transaction_id = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        # One booking per patient per treatment per day (idempotent create)
        db.UniqueConstraint("treatment", "date", "patient", name="uq_booking_identity"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "treatment": self.treatment,
            "date": self.date,
            "slot": self.slot,
            "patient": self.patient,
            "patientName": self.patient_name,
            "paid": self.paid,
            "transactionId": self.transaction_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
