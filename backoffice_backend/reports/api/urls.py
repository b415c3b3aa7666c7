# reports/api/urls.py

from django.urls import path

from reports.api.views import (
    DailySalesView,
    DashboardView,
    SalesSummaryView,
    SalesTrendView,
    TopProductsView,
)

urlpatterns = [
    path("dashboard/", DashboardView.as_view(), name="reports-dashboard"),
    path("sales-trend/", SalesTrendView.as_view(), name="reports-sales-trend"),
    path("sales-summary/", SalesSummaryView.as_view(), name="reports-sales-summary"),
    path("top-products/", TopProductsView.as_view(), name="reports-top-products"),
    path("daily-sales/", DailySalesView.as_view(), name="reports-daily-sales"),
]
