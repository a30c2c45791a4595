"""
Models for the points app.

`AccountBalance` holds one row per user with the running totals; its check
constraints make the storage layer refuse a negative balance or totals that
do not add up.  `LedgerEntry` is the append-only audit trail: every credit,
debit and adjustment writes exactly one entry, and the entries for a user
sum to their balance.
"""
from django.conf import settings
from django.db import models
from django.db.models import F, Q


class AccountBalance(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="points_balance",
    )
    balance = models.BigIntegerField(default=0)
    total_earned = models.BigIntegerField(default=0)
    total_spent = models.BigIntegerField(default=0)
    last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "points_balances"
        constraints = [
            models.CheckConstraint(condition=Q(balance__gte=0), name="points_balance_non_negative"),
            models.CheckConstraint(
                condition=Q(balance=F("total_earned") - F("total_spent")),
                name="points_balance_matches_totals",
            ),
        ]

    def __str__(self) -> str:
        return f"Balance<{self.user_id}: {self.balance}>"


class LedgerEntry(models.Model):
    KIND_EARNED = "EARNED"
    KIND_SPENT = "SPENT"
    KIND_ADJUSTED = "ADJUSTED"
    KIND_CHOICES = [
        (KIND_EARNED, "Earned"),
        (KIND_SPENT, "Spent"),
        (KIND_ADJUSTED, "Adjusted"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="points_history",
    )
    amount = models.BigIntegerField()
    kind = models.CharField(max_length=16, choices=KIND_CHOICES)
    description = models.CharField(max_length=500, blank=True)
    reference_id = models.CharField(max_length=255, blank=True, null=True)
    balance_after = models.BigIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "points_history"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="points_hist_user_created_idx"),
            models.Index(fields=["reference_id"], name="points_hist_reference_idx"),
        ]

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise ValueError("Ledger entries are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Ledger entries cannot be deleted")

    def __str__(self) -> str:
        return f"{self.kind} {self.amount:+d} for {self.user_id}"
