"""
Views for the payments app.

The webhook endpoint authenticates the processor with the shared
``X-Callback-Token`` header, stores the delivery and hands it to Celery.
Plans are readable by anyone; a member's own payments need a login.
"""
from __future__ import annotations

import hmac
import logging

from django.conf import settings
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from rest_framework import permissions, status, views
from rest_framework.response import Response

from .models import Payment, SubscriptionPlan
from .serializers import PaymentSerializer, SubscriptionPlanSerializer
from .services import log_webhook
from .tasks import process_payment_webhook

logger = logging.getLogger(__name__)


class SubscriptionPlanListView(views.APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        plans = SubscriptionPlan.objects.filter(is_active=True).order_by("amount", "id")
        return Response({"plans": SubscriptionPlanSerializer(plans, many=True).data})


class MyPaymentsView(views.APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        payments = Payment.objects.filter(user=request.user).order_by("-created_at")
        return Response({"payments": PaymentSerializer(payments, many=True).data})


@method_decorator(csrf_exempt, name="dispatch")
class PaymentWebhookView(views.APIView):
    """Receive subscription events from the billing processor."""

    authentication_classes = []
    permission_classes = []
    throttle_classes = []

    def post(self, request):
        expected = settings.PAYMENT_WEBHOOK_TOKEN or ""
        supplied = request.META.get("HTTP_X_CALLBACK_TOKEN", "")
        if not expected or not hmac.compare_digest(supplied.encode(), expected.encode()):
            logger.warning("Rejected payment webhook with invalid token")
            return Response({"error": "Invalid webhook token"}, status=status.HTTP_401_UNAUTHORIZED)

        payload = request.data if isinstance(request.data, dict) else {}
        log = log_webhook(dict(payload))
        process_payment_webhook.delay(log.pk)
        return Response({"success": True, "log_id": log.pk})
