from datetime import datetime
from models.db import db

class Payment(db.Model):
    __tablename__ = "payments"

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id"), nullable=False, index=True)

    # one row per completed payment event; a replayed event hits this constraint
    transaction_id = db.Column(db.String(255), nullable=False, unique=True, index=True)
    amount = db.Column(db.Float, nullable=False)

    treatment = db.Column(db.String(120), nullable=True)
    date = db.Column(db.String(40), nullable=True)
    slot = db.Column(db.String(60), nullable=True)
    patient = db.Column(db.String(255), nullable=True)
    patient_name = db.Column(db.String(120), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "booking_id": self.booking_id,
            "transactionId": self.transaction_id,
            "amount": self.amount,
            "treatment": self.treatment,
            "date": self.date,
            "slot": self.slot,
            "patient": self.patient,
            "patientName": self.patient_name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
