"""
Models for the events app.

An `Event` is something members redeem points for.  Its attendee counter is
only ever changed through conditional UPDATEs in `events.capacity`, and a
check constraint keeps it between zero and `max_attendees`.  An
`EventRegistration` is created once per (user, event) pair by the
redemption coordinator; the pair and the reservation code are both unique
at the database level.
"""
from django.conf import settings
from django.db import models
from django.db.models import F, Q


class Event(models.Model):
    """A club event with a points price and a fixed number of seats."""
    STATUS_UPCOMING = "UPCOMING"
    STATUS_ONGOING = "ONGOING"
    STATUS_COMPLETED = "COMPLETED"
    STATUS_CANCELLED = "CANCELLED"
    STATUS_CHOICES = [
        (STATUS_UPCOMING, "Upcoming"),
        (STATUS_ONGOING, "Ongoing"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    event_date = models.DateTimeField()
    points_cost = models.PositiveIntegerField(default=0)
    max_attendees = models.PositiveIntegerField()
    current_attendees = models.PositiveIntegerField(default=0)
    image_url = models.URLField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_UPCOMING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["event_date"]
        indexes = [
            models.Index(fields=["status", "event_date"], name="event_status_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(max_attendees__gt=0), name="event_max_attendees_positive"),
            models.CheckConstraint(
                condition=Q(current_attendees__gte=0) & Q(current_attendees__lte=F("max_attendees")),
                name="event_attendees_within_capacity",
            ),
        ]

    @property
    def seats_left(self) -> int:
        return max(self.max_attendees - self.current_attendees, 0)

    def __str__(self) -> str:
        return f"{self.title} ({self.status})"


class EventRegistration(models.Model):
    STATUS_REGISTERED = "REGISTERED"
    STATUS_ATTENDED = "ATTENDED"
    STATUS_CANCELLED = "CANCELLED"
    STATUS_CHOICES = [
        (STATUS_REGISTERED, "Registered"),
        (STATUS_ATTENDED, "Attended"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="registrations")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="event_registrations",
    )
    points_spent = models.PositiveIntegerField()
    reservation_code = models.CharField(max_length=32, unique=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_REGISTERED)
    registered_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "event_registrations"
        constraints = [
            models.UniqueConstraint(fields=["user", "event"], name="unique_registration_per_user_event"),
        ]
        indexes = [
            models.Index(fields=["user", "registered_at"], name="event_reg_user_idx"),
            models.Index(fields=["event", "status"], name="event_reg_event_status_idx"),
        ]

    def __str__(self):
        return f"{self.reservation_code}: {self.user_id} -> {self.event_id}"
