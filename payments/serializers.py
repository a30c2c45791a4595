from __future__ import annotations

from rest_framework import serializers

from .models import Payment, SubscriptionPlan


class SubscriptionPlanSerializer(serializers.ModelSerializer):
    class Meta:
        model = SubscriptionPlan
        fields = [
            "id",
            "code",
            "name",
            "description",
            "amount",
            "currency",
            "points_per_month",
            "bonus_points",
        ]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = ["id", "processor_payment_id", "amount", "status", "payment_method", "paid_at", "created_at"]
        read_only_fields = fields
