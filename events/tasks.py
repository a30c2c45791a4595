from __future__ import annotations

import logging

from celery import shared_task
from django.db.models import Count, Q

from .models import Event, EventRegistration

logger = logging.getLogger(__name__)


@shared_task
def reconcile_event_capacity() -> list[dict]:
    """Compare each event's attendee counter with its live registrations."""
    events = Event.objects.annotate(
        live_registrations=Count(
            "registrations",
            filter=~Q(registrations__status=EventRegistration.STATUS_CANCELLED),
        )
    )
    mismatches = []
    for event in events.iterator():
        if event.current_attendees != event.live_registrations:
            mismatch = {
                "event_id": event.pk,
                "current_attendees": event.current_attendees,
                "registrations": event.live_registrations,
            }
            logger.error("Capacity mismatch: %s", mismatch)
            mismatches.append(mismatch)
    logger.info("Capacity reconciliation finished, %d mismatches", len(mismatches))
    return mismatches
