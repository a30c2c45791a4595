"""
Models for the users app.

A `MemberProfile` extends the built-in `auth.User` with the club-specific
fields: contact details, the membership status flipped by the billing
collaborator and the back-office role.  The profile is created
automatically via signals when a new user instance is saved.
"""
from django.conf import settings
from django.db import models


class MemberProfile(models.Model):
    """Extension of Django's built-in User model."""

    STATUS_PENDING = "PENDING"
    STATUS_ACTIVE_MEMBER = "ACTIVE_MEMBER"
    STATUS_INACTIVE = "INACTIVE"
    STATUS_GUEST = "GUEST"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACTIVE_MEMBER, "Active member"),
        (STATUS_INACTIVE, "Inactive"),
        (STATUS_GUEST, "Guest"),
    ]

    ROLE_USER = "user"
    ROLE_ADMIN = "admin"
    ROLE_SUPER_ADMIN = "super_admin"
    ROLE_CHOICES = [
        (ROLE_USER, "User"),
        (ROLE_ADMIN, "Admin"),
        (ROLE_SUPER_ADMIN, "Super admin"),
    ]
    ADMIN_ROLES = (ROLE_ADMIN, ROLE_SUPER_ADMIN)

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    full_name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    address = models.TextField(blank=True)
    birth_date = models.DateField(null=True, blank=True)
    membership_status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_USER)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["membership_status"], name="member_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Profile<{self.user_id}:{self.membership_status}>"
