from django.urls import path

from .views import BalanceView, HistoryView

urlpatterns = [
    path("points/balance/", BalanceView.as_view(), name="points-balance"),
    path("points/history/", HistoryView.as_view(), name="points-history"),
]
