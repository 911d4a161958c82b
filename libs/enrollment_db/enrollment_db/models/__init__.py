# enrollment_db/models/__init__.py
"""Import all models so `Base.metadata` knows every table."""

from enrollment_db.models.course import Cohort, CohortMembership, Course, MembershipRole
from enrollment_db.models.email_log import EmailLogEntry, EmailSourceType, EmailStatus, EmailType
from enrollment_db.models.enrollment import PendingEnrollment, PendingEnrollmentStatus
from enrollment_db.models.payments import Payment, PaymentStatus, ScheduledCharge, ScheduledChargeStatus
from enrollment_db.models.paywall import DEFAULT_CHARGE_DAYS_BEFORE, Paywall
from enrollment_db.models.profile import Profile

__all__ = [
    "DEFAULT_CHARGE_DAYS_BEFORE",
    "Cohort",
    "CohortMembership",
    "Course",
    "EmailLogEntry",
    "EmailSourceType",
    "EmailStatus",
    "EmailType",
    "MembershipRole",
    "Payment",
    "PaymentStatus",
    "Paywall",
    "PendingEnrollment",
    "PendingEnrollmentStatus",
    "Profile",
    "ScheduledCharge",
    "ScheduledChargeStatus",
]
