# store/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from store.api.views import (
    LoyaltyRuleViewSet,
    SettingDetailView,
    SettingListView,
    StoreInfoView,
)

router = DefaultRouter()
router.register(r"loyalty-rules", LoyaltyRuleViewSet, basename="loyalty-rules")

urlpatterns = [
    path("info/", StoreInfoView.as_view(), name="store-info"),
    path("settings/", SettingListView.as_view(), name="store-settings"),
    path("settings/<str:key>/", SettingDetailView.as_view(), name="store-setting-detail"),
    path("", include(router.urls)),
]
