from rest_framework import serializers

from users.models import MemberProfile

from .models import AdminActionLog


class PointsAdjustmentSerializer(serializers.Serializer):
    user_id = serializers.IntegerField(min_value=1)
    amount = serializers.IntegerField()
    reason = serializers.CharField(max_length=400, trim_whitespace=True)

    def validate_amount(self, value):
        if value == 0:
            raise serializers.ValidationError("Amount must not be zero.")
        return value


class MembershipStatusSerializer(serializers.Serializer):
    membership_status = serializers.ChoiceField(choices=MemberProfile.STATUS_CHOICES)


class AdminActionLogSerializer(serializers.ModelSerializer):
    admin_email = serializers.EmailField(source="admin.email", read_only=True, default=None)

    class Meta:
        model = AdminActionLog
        fields = ["id", "admin", "admin_email", "action", "target_type", "target_id", "details", "created_at"]
        read_only_fields = fields
