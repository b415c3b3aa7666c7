# users/urls.py

from django.urls import path

from users.views import MeView, StaffListCreateView

urlpatterns = [
    path("me/", MeView.as_view(), name="me"),
    path("staff/", StaffListCreateView.as_view(), name="staff"),
]
