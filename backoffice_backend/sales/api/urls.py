# sales/api/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from sales.api.views import SaleViewSet

# SimpleRouter: no browsable root view shadowing the sale list at ""
router = SimpleRouter()
router.register(r"", SaleViewSet, basename="sales")

urlpatterns = [
    path("", include(router.urls)),
]
