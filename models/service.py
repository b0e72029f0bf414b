from models.db import db

class Service(db.Model):
    __tablename__ = "services"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False, index=True)

    # ordered daily template, e.g. ["08.00 AM - 08.30 AM", ...]; never changed by bookings
    slots = db.Column(db.JSON, nullable=False, default=list)

    price = db.Column(db.Integer, nullable=False, default=0)  # whole currency units
