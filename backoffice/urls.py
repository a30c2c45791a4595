from django.urls import path
from rest_framework.routers import DefaultRouter

from events.views import AdminEventViewSet

from .views import AdminLogListView, DashboardStatsView, MembershipStatusView, PointsAdjustmentView

router = DefaultRouter()
router.register(r"events", AdminEventViewSet, basename="admin-events")

urlpatterns = [
    path("points/adjust/", PointsAdjustmentView.as_view(), name="admin-points-adjust"),
    path("users/<int:user_id>/membership/", MembershipStatusView.as_view(), name="admin-membership"),
    path("logs/", AdminLogListView.as_view(), name="admin-logs"),
    path("stats/", DashboardStatsView.as_view(), name="admin-stats"),
]

urlpatterns += router.urls
