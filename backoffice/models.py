from django.conf import settings
from django.db import models


class AdminActionLog(models.Model):
    """Append-only record of what an administrator changed and why."""

    ACTION_ADJUST_POINTS = "ADJUST_POINTS"
    ACTION_UPDATE_MEMBERSHIP = "UPDATE_MEMBERSHIP"
    ACTION_CHOICES = [
        (ACTION_ADJUST_POINTS, "Adjust points"),
        (ACTION_UPDATE_MEMBERSHIP, "Update membership"),
    ]

    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="admin_actions",
    )
    action = models.CharField(max_length=32, choices=ACTION_CHOICES)
    target_type = models.CharField(max_length=32)
    target_id = models.CharField(max_length=64)
    details = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "admin_logs"
        indexes = [
            models.Index(fields=["target_type", "target_id", "created_at"], name="admin_log_target_idx"),
            models.Index(fields=["action", "created_at"], name="admin_log_action_idx"),
        ]
        ordering = ["-created_at", "-id"]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Admin action logs are append-only")
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"AdminActionLog({self.action}) {self.target_type}:{self.target_id} by {self.admin_id}"
