from .availability import AvailabilityEngine
from .booking import BookingWorkflow, BookingResult
from .charges import ChargeService
from .notifications import Notifier
from .reconciliation import PaymentReconciler
from .store import Store
