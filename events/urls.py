from django.urls import path

from .views import EventListView, MyRegistrationsView, RedeemView

urlpatterns = [
    path("events/", EventListView.as_view(), name="event-list"),
    path("events/redeem/", RedeemView.as_view(), name="event-redeem"),
    path("events/registrations/mine/", MyRegistrationsView.as_view(), name="event-registrations-mine"),
]
