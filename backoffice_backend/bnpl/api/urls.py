# bnpl/api/urls.py

from django.urls import path

from bnpl.api.views import (
    BnplOverviewView,
    BnplPaymentListView,
    BnplTransactionDetailView,
    BnplTransactionListView,
    BnplTransactionPayView,
    CustomerBnplSummaryView,
    CustomerPaymentView,
    MarkOverdueView,
)

urlpatterns = [
    path("transactions/", BnplTransactionListView.as_view(), name="bnpl-transactions"),
    path("transactions/<uuid:transaction_id>/", BnplTransactionDetailView.as_view(), name="bnpl-transaction-detail"),
    path("transactions/<uuid:transaction_id>/pay/", BnplTransactionPayView.as_view(), name="bnpl-transaction-pay"),
    path("customers/<uuid:customer_id>/pay/", CustomerPaymentView.as_view(), name="bnpl-customer-pay"),
    path("customers/<uuid:customer_id>/summary/", CustomerBnplSummaryView.as_view(), name="bnpl-customer-summary"),
    path("payments/", BnplPaymentListView.as_view(), name="bnpl-payments"),
    path("overview/", BnplOverviewView.as_view(), name="bnpl-overview"),
    path("mark-overdue/", MarkOverdueView.as_view(), name="bnpl-mark-overdue"),
]
