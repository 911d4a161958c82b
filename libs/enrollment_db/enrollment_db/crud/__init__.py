# enrollment_db/crud/__init__.py

from .course import CohortMembershipDAO, CourseDAO
from .email_log import EmailLogDAO
from .enrollment import PendingEnrollmentDAO
from .payments import PaymentDAO, ScheduledChargeDAO
from .paywall import PaywallDAO
from .profile import ProfileDAO

__all__ = [
    "CohortMembershipDAO",
    "CourseDAO",
    "EmailLogDAO",
    "PaymentDAO",
    "PaywallDAO",
    "PendingEnrollmentDAO",
    "ProfileDAO",
    "ScheduledChargeDAO",
]
