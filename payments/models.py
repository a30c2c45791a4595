"""
Database models for the payments app.

The billing processor owns the money; these tables only mirror what its
webhooks tell us.  A `SubscriptionPlan` says how many points a paid month
is worth, a `Subscription` ties a member to the processor's subscription
id, each `Payment` is keyed by the processor's payment id (which is what
makes repeated webhook deliveries harmless) and every delivery is kept in
`WebhookLog` whether or not it could be processed.
"""
from __future__ import annotations

from django.conf import settings
from django.db import models


class SubscriptionPlan(models.Model):
    code = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    amount = models.PositiveIntegerField(help_text="Monthly price in the smallest currency unit")
    currency = models.CharField(max_length=10, default="IDR")
    points_per_month = models.PositiveIntegerField(default=0)
    bonus_points = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["amount", "id"]

    @property
    def points_per_payment(self) -> int:
        return self.points_per_month + self.bonus_points

    def __str__(self) -> str:
        return f"{self.name} ({self.currency} {self.amount})"


class Subscription(models.Model):
    STATUS_PENDING = "PENDING"
    STATUS_ACTIVE = "ACTIVE"
    STATUS_INACTIVE = "INACTIVE"
    STATUS_CANCELLED = "CANCELLED"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACTIVE, "Active"),
        (STATUS_INACTIVE, "Inactive"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="subscriptions",
    )
    plan = models.ForeignKey(
        SubscriptionPlan,
        on_delete=models.PROTECT,
        related_name="subscriptions",
        null=True,
        blank=True,
    )
    processor_customer_id = models.CharField(max_length=255, blank=True)
    processor_subscription_id = models.CharField(max_length=255, unique=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    amount = models.PositiveIntegerField()
    start_date = models.DateTimeField(auto_now_add=True)
    next_payment_date = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-start_date"]

    def __str__(self) -> str:
        return f"{self.processor_subscription_id} ({self.status})"


class Payment(models.Model):
    STATUS_PENDING = "PENDING"
    STATUS_SUCCEEDED = "SUCCEEDED"
    STATUS_FAILED = "FAILED"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_SUCCEEDED, "Succeeded"),
        (STATUS_FAILED, "Failed"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="payments",
    )
    subscription = models.ForeignKey(
        Subscription,
        on_delete=models.SET_NULL,
        related_name="payments",
        null=True,
        blank=True,
    )
    processor_payment_id = models.CharField(max_length=255, unique=True)
    amount = models.PositiveIntegerField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    payment_method = models.CharField(max_length=64, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Payment {self.processor_payment_id} ({self.status})"


class WebhookLog(models.Model):
    event_type = models.CharField(max_length=100, blank=True)
    processor_id = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=64, blank=True)
    payload = models.JSONField(default=dict)
    processed = models.BooleanField(default=False)
    processed_at = models.DateTimeField(null=True, blank=True)
    error = models.TextField(blank=True)
    received_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-received_at"]
        indexes = [
            models.Index(fields=["event_type", "received_at"], name="webhook_type_received_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.event_type} {self.processor_id}"
