from __future__ import annotations

from typing import NewType
from uuid import UUID

RequestId = NewType("RequestId", UUID)
ProfileId = NewType("ProfileId", UUID)
CourseId = NewType("CourseId", UUID)
CohortId = NewType("CohortId", UUID)
CohortMembershipId = NewType("CohortMembershipId", UUID)
PaywallId = NewType("PaywallId", UUID)
PaymentId = NewType("PaymentId", UUID)
PendingEnrollmentId = NewType("PendingEnrollmentId", UUID)
ScheduledChargeId = NewType("ScheduledChargeId", UUID)
EmailLogId = NewType("EmailLogId", UUID)
