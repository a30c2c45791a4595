"""
URL configuration for the payments app.

Include this module under ``/api/payments/`` in the project-level URL config.
"""
from django.urls import path

from .views import MyPaymentsView, PaymentWebhookView, SubscriptionPlanListView

urlpatterns = [
    path("plans/", SubscriptionPlanListView.as_view(), name="subscription-plans"),
    path("mine/", MyPaymentsView.as_view(), name="payments-mine"),
    path("webhook/", PaymentWebhookView.as_view(), name="payment-webhook"),
]
