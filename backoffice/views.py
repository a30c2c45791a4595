"""
Back-office endpoints.

All of them require `IsClubAdmin`.  Input is validated by the serializers
here and then handed to `AdminAdjustmentService`; ledger errors such as a
negative adjustment larger than the balance are rendered by the project
exception handler.
"""
from django.contrib.auth import get_user_model
from django.db.models import Count, Sum
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from common.permissions import IsClubAdmin
from events.models import Event, EventRegistration
from points.models import AccountBalance
from users.models import MemberProfile

from .serializers import AdminActionLogSerializer, MembershipStatusSerializer, PointsAdjustmentSerializer
from .services import AdminAdjustmentService

User = get_user_model()


class PointsAdjustmentView(APIView):
    """POST /api/admin/points/adjust/ {"user_id", "amount", "reason"}"""
    permission_classes = [IsClubAdmin]

    def post(self, request):
        payload = PointsAdjustmentSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        new_balance = AdminAdjustmentService().adjust(
            data["user_id"], data["amount"], data["reason"], admin_id=request.user.pk
        )
        return Response({"new_balance": new_balance}, status=status.HTTP_200_OK)


class MembershipStatusView(APIView):
    permission_classes = [IsClubAdmin]

    def post(self, request, user_id):
        payload = MembershipStatusSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        profile = AdminAdjustmentService().set_membership_status(
            user_id, payload.validated_data["membership_status"], admin_id=request.user.pk
        )
        return Response({"user_id": user_id, "membership_status": profile.membership_status})


class AdminLogListView(APIView):
    permission_classes = [IsClubAdmin]

    def get(self, request):
        try:
            limit = int(request.query_params.get("limit", 100))
        except (TypeError, ValueError):
            limit = 100
        limit = max(1, min(limit, 500))
        logs = AdminAdjustmentService().recent_actions(limit)
        return Response({"logs": AdminActionLogSerializer(logs, many=True).data})


class DashboardStatsView(APIView):
    permission_classes = [IsClubAdmin]

    def get(self, request):
        by_status = dict(
            MemberProfile.objects.values("membership_status")
            .annotate(n=Count("id"))
            .values_list("membership_status", "n")
        )
        points = AccountBalance.objects.aggregate(
            outstanding=Sum("balance"),
            earned=Sum("total_earned"),
            spent=Sum("total_spent"),
        )
        return Response({
            "total_users": User.objects.count(),
            "active_members": by_status.get(MemberProfile.STATUS_ACTIVE_MEMBER, 0),
            "members_by_status": by_status,
            "upcoming_events": Event.objects.filter(status=Event.STATUS_UPCOMING).count(),
            "total_registrations": EventRegistration.objects.exclude(
                status=EventRegistration.STATUS_CANCELLED
            ).count(),
            "points_outstanding": points["outstanding"] or 0,
            "points_earned": points["earned"] or 0,
            "points_spent": points["spent"] or 0,
        })
