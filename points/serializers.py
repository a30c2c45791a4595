"""
Serializers for the points app (read-only views of balances and history).
"""
from rest_framework import serializers

from .models import AccountBalance, LedgerEntry


class AccountBalanceSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = AccountBalance
        fields = ["user_id", "balance", "total_earned", "total_spent", "last_updated"]
        read_only_fields = fields


class LedgerEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = LedgerEntry
        fields = ["id", "amount", "kind", "description", "reference_id", "balance_after", "created_at"]
        read_only_fields = fields
