from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role used for authorization."""

    ADMIN = "admin"
    STUDENT = "student"


class ApprovalStatus(str, Enum):
    """Admin approval state of a newly registered account."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ShiftId(str, Enum):
    MORNING = "morning"
    NOON = "noon"
    EVENING = "evening"
    NIGHT = "night"


class BookingStatus(str, Enum):
    PENDING = "pending"
    BOOKED = "booked"
    AVAILABLE = "available"


class AttendanceStatus(str, Enum):
    """Stored attendance row kind."""

    PRESENT = "present"
    ABSENT = "absent"


class ShiftDayStatus(str, Enum):
    """Derived per-shift, per-day classification (never stored)."""

    PRESENT = "present"
    CHECKED_IN = "checked_in"
    ABSENT = "absent"
    PENDING = "pending"


class PaymentStatus(str, Enum):
    """Admission payment state."""

    PENDING = "pending"
    PAID = "paid"


class CashPaymentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentMode(str, Enum):
    UPI = "upi"
    CASH = "cash"
    CARD = "card"


class PaymentTarget(str, Enum):
    """What a cash payment unblocks once approved."""

    BOOKING = "booking"
    ADMISSION = "admission"


class NotificationType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    SUCCESS = "success"
    ERROR = "error"
