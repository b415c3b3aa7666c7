# products/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from products.api.views import (
    CategoryViewSet,
    DamageReportApproveView,
    DamageReportListCreateView,
    DamageReportRejectView,
    InventoryReceiptListView,
    InventoryStatusView,
    ProductImportView,
    ProductViewSet,
    ProfitAnalysisListView,
    StockMovementListView,
)

router = DefaultRouter()
router.register(r"categories", CategoryViewSet, basename="categories")
router.register(r"items", ProductViewSet, basename="products")

urlpatterns = [
    # explicit routes BEFORE router URLs
    path("import/", ProductImportView.as_view(), name="product-import"),
    path("status/", InventoryStatusView.as_view(), name="inventory-status"),
    path("movements/", StockMovementListView.as_view(), name="stock-movements"),
    path("receipts/", InventoryReceiptListView.as_view(), name="inventory-receipts"),
    path("profit-analysis/", ProfitAnalysisListView.as_view(), name="profit-analysis"),
    path("damage-reports/", DamageReportListCreateView.as_view(), name="damage-reports"),
    path(
        "damage-reports/<uuid:report_id>/approve/",
        DamageReportApproveView.as_view(),
        name="damage-report-approve",
    ),
    path(
        "damage-reports/<uuid:report_id>/reject/",
        DamageReportRejectView.as_view(),
        name="damage-report-reject",
    ),
    path("", include(router.urls)),
]
