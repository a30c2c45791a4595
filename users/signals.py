"""
Signals for the users app.

Ensure every new `User` gets a `MemberProfile` and an empty points
account as part of the same save.
"""
from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from points.ledger import LedgerStore
from .models import MemberProfile


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def ensure_member_records(sender, instance, created, **kwargs):
    """Create the profile and the zero balance row for brand-new users."""
    if not created:
        return
    MemberProfile.objects.get_or_create(user=instance)
    LedgerStore().open_account(instance.pk)
