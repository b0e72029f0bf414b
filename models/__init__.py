from .db import db
from .user import User, Role
from .audit_log import AuditLog
from .service import Service
from .booking import Booking
from .payment import Payment
from .doctor import Doctor
