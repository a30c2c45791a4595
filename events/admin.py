"""
Admin configuration for the events app.

The attendee counter and registrations are read-only here: seats are
taken by the redemption coordinator and given back only through
`CapacityTracker.release_slot`, so the admin can neither cancel nor
delete a registration.
"""
from django.contrib import admin

from .models import Event, EventRegistration


class EventRegistrationInline(admin.TabularInline):
    model = EventRegistration
    extra = 0
    fields = ("user", "reservation_code", "points_spent", "status", "registered_at")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ("title", "event_date", "status", "points_cost", "current_attendees", "max_attendees")
    list_filter = ("status",)
    search_fields = ("title", "location")
    readonly_fields = ("current_attendees", "created_at", "updated_at")
    inlines = [EventRegistrationInline]


@admin.register(EventRegistration)
class EventRegistrationAdmin(admin.ModelAdmin):
    list_display = ("reservation_code", "user", "event", "points_spent", "status", "registered_at")
    list_filter = ("status",)
    search_fields = ("reservation_code", "user__email", "event__title")
    readonly_fields = ("user", "event", "points_spent", "reservation_code", "status", "registered_at")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
