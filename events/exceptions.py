"""
Failure kinds reported by the redemption flow.

Each maps to a stable message and HTTP status through
`common.exceptions.api_exception_handler`.
"""
from rest_framework import status

from common.exceptions import ClubError


class RedemptionError(ClubError):
    pass


class MembershipRequired(RedemptionError):
    code = "membership_required"
    default_message = "Active membership required"
    status_code = status.HTTP_403_FORBIDDEN


class EventNotAvailable(RedemptionError):
    code = "event_not_available"
    default_message = "Event is not available for registration"
    status_code = status.HTTP_400_BAD_REQUEST


class EventNotFound(EventNotAvailable):
    default_message = "Event not found"
    status_code = status.HTTP_404_NOT_FOUND


class AlreadyRegistered(RedemptionError):
    code = "already_registered"
    default_message = "You are already registered for this event"
    status_code = status.HTTP_409_CONFLICT


class RegistrationConflict(AlreadyRegistered):
    """The (user, event) unique constraint fired after the pre-check passed."""


class InsufficientPoints(RedemptionError):
    code = "insufficient_points"
    default_message = "Insufficient points"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, balance: int, required: int, message=None):
        self.balance = balance
        self.required = required
        super().__init__(message, balance=balance, required=required)


class EventFull(RedemptionError):
    code = "event_full"
    default_message = "Event is at full capacity"
    status_code = status.HTTP_409_CONFLICT


class CodeGenerationExhausted(RedemptionError):
    code = "code_generation_exhausted"
    default_message = "Could not allocate a reservation code, please try again"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class RedemptionTimedOut(RedemptionError):
    code = "redemption_timed_out"
    default_message = "Registration timed out, please try again"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


# Outcomes that are part of normal traffic and are not worth alerting on.
EXPECTED_FAILURES = (
    MembershipRequired,
    EventNotAvailable,
    AlreadyRegistered,
    InsufficientPoints,
    EventFull,
)
