import enum
from datetime import datetime
from models.db import db


class Role(str, enum.Enum):
    PATIENT = "patient"
    ADMIN = "admin"

    @classmethod
    def from_value(cls, value):
        """Unknown or missing roles are treated as patient."""
        try:
            return cls(value)
        except ValueError:
            return cls.PATIENT


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(120), nullable=True)

    # NULL means patient
    role = db.Column(db.String(20), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    @property
    def role_enum(self) -> Role:
        return Role.from_value(self.role)

    @property
    def is_admin(self) -> bool:
        return self.role_enum is Role.ADMIN

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role_enum.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
