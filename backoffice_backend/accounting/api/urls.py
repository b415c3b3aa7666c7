# accounting/api/urls.py

from django.urls import path

from accounting.api.views import (
    CashBalanceView,
    CashFlowSummaryView,
    CashLedgerView,
    ExpenseBreakdownView,
    ExpenseListCreateView,
    FinancialSummaryView,
)

urlpatterns = [
    path("expenses/", ExpenseListCreateView.as_view(), name="accounting-expenses"),
    path("cash-ledger/", CashLedgerView.as_view(), name="accounting-cash-ledger"),
    path("cash-balance/", CashBalanceView.as_view(), name="accounting-cash-balance"),
    path("financial-summary/", FinancialSummaryView.as_view(), name="accounting-financial-summary"),
    path("expense-breakdown/", ExpenseBreakdownView.as_view(), name="accounting-expense-breakdown"),
    path("cash-flow/", CashFlowSummaryView.as_view(), name="accounting-cash-flow"),
]
