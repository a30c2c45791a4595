"""
Django admin registration for the payments app.

Payments and webhook logs are evidence of what the processor told us, so
they are read-only here.
"""
from django.contrib import admin

from .models import Payment, Subscription, SubscriptionPlan, WebhookLog


@admin.register(SubscriptionPlan)
class SubscriptionPlanAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "amount", "currency", "points_per_month", "bonus_points", "is_active")
    list_filter = ("is_active", "currency")
    search_fields = ("code", "name")


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ("processor_subscription_id", "user", "plan", "status", "amount", "next_payment_date")
    list_filter = ("status", "plan")
    search_fields = ("processor_subscription_id", "user__email")


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("processor_payment_id", "user", "amount", "status", "paid_at", "created_at")
    list_filter = ("status",)
    search_fields = ("processor_payment_id", "user__email")
    ordering = ("-created_at",)

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(WebhookLog)
class WebhookLogAdmin(admin.ModelAdmin):
    list_display = ("event_type", "processor_id", "status", "processed", "received_at")
    list_filter = ("event_type", "processed")
    search_fields = ("processor_id",)
    readonly_fields = ("event_type", "processor_id", "status", "payload", "processed", "processed_at", "error", "received_at")
