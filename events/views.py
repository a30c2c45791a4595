"""
Views for the events app.

Members browse upcoming events and redeem points for a seat; the redeem
endpoint hands an `AuthContext` and the validated event id to the
redemption coordinator and renders whatever it returns.  Failures are
`ClubError`s and are rendered by the project exception handler.

Admins manage events through `AdminEventViewSet` and can list the
registrations of any event.
"""
import logging

from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from common.permissions import IsClubAdmin
from users.auth_context import AuthContext

from .exceptions import MembershipRequired
from .models import Event, EventRegistration
from .redemption import RedemptionCoordinator
from .serializers import (
    EventRegistrationSerializer,
    EventSerializer,
    MemberEventSerializer,
    RedeemRequestSerializer,
)

logger = logging.getLogger(__name__)


class EventListView(APIView):
    """GET /api/events/ - non-cancelled events for active members."""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        auth = AuthContext.from_user(request.user)
        if not auth.is_active_member:
            raise MembershipRequired()
        events = Event.objects.exclude(status=Event.STATUS_CANCELLED).order_by("event_date", "id")
        registered = set(
            EventRegistration.objects.filter(user_id=auth.user_id).values_list("event_id", flat=True)
        )
        serializer = MemberEventSerializer(
            events,
            many=True,
            context={"request": request, "registered_event_ids": registered},
        )
        return Response({"events": serializer.data})


class RedeemView(APIView):
    """POST /api/events/redeem/ {"event_id": ...}"""
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        payload = RedeemRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        auth = AuthContext.from_user(request.user)
        result = RedemptionCoordinator().redeem(auth, payload.validated_data["event_id"])
        return Response(result.as_dict(), status=status.HTTP_201_CREATED)


class MyRegistrationsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        registrations = (
            EventRegistration.objects.filter(user=request.user)
            .select_related("event", "user")
            .order_by("-registered_at")
        )
        return Response({"registrations": EventRegistrationSerializer(registrations, many=True).data})


class AdminEventViewSet(viewsets.ModelViewSet):
    """CRUD over events for the back-office."""
    queryset = Event.objects.all().order_by("-event_date")
    serializer_class = EventSerializer
    permission_classes = [IsClubAdmin]

    def get_queryset(self):
        qs = super().get_queryset()
        status_filter = self.request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter.upper())
        return qs

    def perform_create(self, serializer):
        event = serializer.save()
        logger.info("Event %s created by admin %s", event.pk, self.request.user.pk)

    def perform_destroy(self, instance):
        logger.info("Event %s deleted by admin %s", instance.pk, self.request.user.pk)
        instance.delete()

    @action(detail=True, methods=["get"], url_path="registrations")
    def registrations(self, request, pk=None):
        event = self.get_object()
        qs = (
            EventRegistration.objects.filter(event=event)
            .select_related("user", "event")
            .order_by("-registered_at")
        )
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(EventRegistrationSerializer(page, many=True).data)
        return Response(EventRegistrationSerializer(qs, many=True).data)
