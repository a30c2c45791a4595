"""
Initial migration for the events app.

Creates events with their capacity constraints and the registrations
table with unique (user, event) pairs and unique reservation codes.
"""
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("location", models.CharField(blank=True, max_length=255)),
                ("event_date", models.DateTimeField()),
                ("points_cost", models.PositiveIntegerField(default=0)),
                ("max_attendees", models.PositiveIntegerField()),
                ("current_attendees", models.PositiveIntegerField(default=0)),
                ("image_url", models.URLField(blank=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("UPCOMING", "Upcoming"),
                            ("ONGOING", "Ongoing"),
                            ("COMPLETED", "Completed"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        default="UPCOMING",
                        max_length=16,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["event_date"],
                "indexes": [models.Index(fields=["status", "event_date"], name="event_status_date_idx")],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(max_attendees__gt=0), name="event_max_attendees_positive"),
                    models.CheckConstraint(
                        condition=models.Q(current_attendees__gte=0)
                        & models.Q(current_attendees__lte=models.F("max_attendees")),
                        name="event_attendees_within_capacity",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="EventRegistration",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("points_spent", models.PositiveIntegerField()),
                ("reservation_code", models.CharField(max_length=32, unique=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("REGISTERED", "Registered"), ("ATTENDED", "Attended"), ("CANCELLED", "Cancelled")],
                        default="REGISTERED",
                        max_length=16,
                    ),
                ),
                ("registered_at", models.DateTimeField(auto_now_add=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to="events.event",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="event_registrations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "event_registrations",
                "indexes": [
                    models.Index(fields=["user", "registered_at"], name="event_reg_user_idx"),
                    models.Index(fields=["event", "status"], name="event_reg_event_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=["user", "event"], name="unique_registration_per_user_event"),
                ],
            },
        ),
    ]
