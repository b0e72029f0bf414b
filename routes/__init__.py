from .health import health_bp
from .availability import availability_bp
from .booking import booking_bp
from .payments import payments_bp
from .users import users_bp
from .admin import admin_bp
from .doctors import doctors_bp
from .audit_logs import audit_bp
