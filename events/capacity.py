"""
Event capacity tracker.

Seats are taken and given back with single conditional UPDATEs so that the
database decides who gets the last seat; the row is never read and
written back from Python.
"""
import enum
import logging

from django.db.models import F
from django.utils import timezone

from .models import Event

logger = logging.getLogger(__name__)


class SlotOutcome(enum.Enum):
    RESERVED = "reserved"
    FULL = "full"
    NOT_FOUND = "not_found"


class CapacityTracker:
    def try_reserve_slot(self, event_id) -> SlotOutcome:
        reserved = Event.objects.filter(
            pk=event_id,
            current_attendees__lt=F("max_attendees"),
        ).update(current_attendees=F("current_attendees") + 1, updated_at=timezone.now())
        if reserved:
            return SlotOutcome.RESERVED
        if Event.objects.filter(pk=event_id).exists():
            logger.info("Event %s is full", event_id)
            return SlotOutcome.FULL
        return SlotOutcome.NOT_FOUND

    def release_slot(self, event_id) -> bool:
        """Give a seat back; never drops below zero."""
        released = Event.objects.filter(
            pk=event_id,
            current_attendees__gt=0,
        ).update(current_attendees=F("current_attendees") - 1, updated_at=timezone.now())
        if not released:
            logger.warning("Release requested for event %s with no reserved seats", event_id)
        return bool(released)
