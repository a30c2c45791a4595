"""
Admin configuration for the users app.

Re-registers the default `User` admin with an inline member profile so
membership status and role are visible in the Django admin.  Both are
read-only here; they change through the back-office endpoints, which
write an audit log entry.
"""
from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import MemberProfile

User = get_user_model()

AUDITED_FIELDS = ("membership_status", "role")


class MemberProfileInline(admin.StackedInline):
    model = MemberProfile
    can_delete = False
    readonly_fields = AUDITED_FIELDS


class UserAdmin(BaseUserAdmin):
    inlines = [MemberProfileInline]
    list_display = ("username", "email", "is_active", "date_joined")

    def get_inlines(self, request, obj):
        # The profile row is created by a post_save signal on new users.
        return self.inlines if obj is not None else []

    def has_delete_permission(self, request, obj=None):
        # Cascades to event registrations.
        return False


admin.site.unregister(User)
admin.site.register(User, UserAdmin)


@admin.register(MemberProfile)
class MemberProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "full_name", "membership_status", "role", "created_at")
    list_filter = ("membership_status", "role")
    search_fields = ("user__email", "full_name", "phone")
    readonly_fields = AUDITED_FIELDS
