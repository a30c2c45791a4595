"""
Authentication, registration and profile endpoints for the users app.
"""
import logging

from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView

from points.ledger import LedgerStore
from .models import MemberProfile
from .serializers import EmailTokenObtainPairSerializer, MemberProfileSerializer, RegisterSerializer

logger = logging.getLogger(__name__)


class RegisterView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("Registered user %s", user.pk)

        refresh = EmailTokenObtainPairSerializer.get_token(user)
        payload = serializer.data
        payload.update({
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        })
        return Response(payload, status=status.HTTP_201_CREATED)


class EmailTokenObtainPairView(TokenObtainPairView):
    """
    Obtain JWT tokens using email + password.
    """
    permission_classes = [permissions.AllowAny]
    serializer_class = EmailTokenObtainPairSerializer


class ProfileView(APIView):
    """The authenticated member's profile with their points summary."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        user = request.user
        profile, _ = MemberProfile.objects.get_or_create(user=user)
        account = LedgerStore().get_account(user.pk)
        return Response({
            "id": user.pk,
            "email": user.email,
            "profile": MemberProfileSerializer(profile).data,
            "points": {
                "balance": account.balance,
                "total_earned": account.total_earned,
                "total_spent": account.total_spent,
                "last_updated": account.last_updated,
            },
        })

    def patch(self, request):
        profile, _ = MemberProfile.objects.get_or_create(user=request.user)
        serializer = MemberProfileSerializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)
