"""
Membership status hooks.

These are the only entry points that flip a member's status.  The billing
collaborator calls `activate_membership` / `deactivate_membership` on
subscription lifecycle events; the back-office uses `set_membership_status`.
"""
import logging

from django.utils import timezone

from .exceptions import MemberNotFound
from .models import MemberProfile

logger = logging.getLogger(__name__)


def set_membership_status(user_id: int, status: str) -> MemberProfile:
    if status not in dict(MemberProfile.STATUS_CHOICES):
        raise ValueError(f"Unknown membership status: {status}")
    updated = MemberProfile.objects.filter(user_id=user_id).update(
        membership_status=status,
        updated_at=timezone.now(),
    )
    if not updated:
        raise MemberNotFound()
    logger.info("Membership status for user %s set to %s", user_id, status)
    return MemberProfile.objects.get(user_id=user_id)


def activate_membership(user_id: int) -> MemberProfile:
    return set_membership_status(user_id, MemberProfile.STATUS_ACTIVE_MEMBER)


def deactivate_membership(user_id: int) -> MemberProfile:
    """Subscription ended: the member falls back to guest access."""
    return set_membership_status(user_id, MemberProfile.STATUS_GUEST)
