from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from accounting.models import CashLedgerEntry, Expense
from accounting.services.cash_ledger import (
    CashLedgerError,
    get_cash_balance,
    record_cash_entry,
    record_manual_entry,
)
from accounting.services.expense_service import ExpenseError, create_expense
from accounting.services.financial_summary import expense_breakdown, get_financial_summary

User = get_user_model()


class CashLedgerTests(TestCase):
    """
    GUARANTEES:
    - Amounts are signed from the entry type
    - A referenced entry is written at most once
    - Balance is the sum of all entries
    """

    def test_signs_follow_entry_type(self):
        record_manual_entry(entry_type=CashLedgerEntry.TYPE_OPENING, amount="1000.00")
        out = record_manual_entry(entry_type=CashLedgerEntry.TYPE_OUT, amount="150.00")

        self.assertEqual(out.amount, Decimal("-150.00"))
        self.assertEqual(get_cash_balance(), Decimal("850.00"))

    def test_referenced_entries_are_idempotent(self):
        first = record_cash_entry(
            entry_type=CashLedgerEntry.TYPE_SALE,
            amount="200.00",
            reference_type="sale",
            reference_id="abc",
        )
        second = record_cash_entry(
            entry_type=CashLedgerEntry.TYPE_SALE,
            amount="200.00",
            reference_type="sale",
            reference_id="abc",
        )

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(CashLedgerEntry.objects.count(), 1)

    def test_manual_entries_limited_to_in_out_opening(self):
        with self.assertRaises(CashLedgerError):
            record_manual_entry(entry_type=CashLedgerEntry.TYPE_SALE, amount="5.00")

    def test_non_positive_amount_rejected(self):
        with self.assertRaises(CashLedgerError):
            record_cash_entry(entry_type=CashLedgerEntry.TYPE_IN, amount="0")


class ExpenseTests(TestCase):
    def test_cash_expense_leaves_the_till(self):
        expense = create_expense(category="Utilities", description="Electricity", amount="2500.00")

        entry = CashLedgerEntry.objects.get(reference_type="expense", reference_id=str(expense.id))
        self.assertEqual(entry.entry_type, CashLedgerEntry.TYPE_EXPENSE)
        self.assertEqual(entry.amount, Decimal("-2500.00"))

    def test_card_expense_has_no_cash_entry(self):
        create_expense(category="Rent", description="March", amount="40000.00", payment_method="bank_transfer")

        self.assertEqual(CashLedgerEntry.objects.count(), 0)
        self.assertEqual(Expense.objects.count(), 1)

    def test_validation(self):
        with self.assertRaisesMessage(ExpenseError, "Expense category is required"):
            create_expense(category=" ", description="x", amount="1.00")
        with self.assertRaisesMessage(ExpenseError, "Amount must be > 0"):
            create_expense(category="Misc", description="x", amount="0")
        with self.assertRaises(ExpenseError):
            create_expense(category="Misc", description="x", amount="1.00", payment_method="cheque")


class FinancialSummaryTests(TestCase):
    def setUp(self):
        create_expense(category="Utilities", description="Water", amount="300.00", expense_date=date(2026, 3, 2))
        create_expense(category="Utilities", description="Power", amount="700.00", expense_date=date(2026, 3, 3))
        create_expense(category="Supplies", description="Bags", amount="1000.00", expense_date=date(2026, 3, 3))
        create_expense(category="Supplies", description="Tape", amount="50.00", expense_date=date(2026, 4, 1))

    def test_breakdown_percentages(self):
        rows = expense_breakdown(start="2026-03-01", end="2026-03-31")

        self.assertEqual([r["category"] for r in rows], ["Supplies", "Utilities"])
        self.assertEqual(rows[0]["percentage"], Decimal("50.00"))
        self.assertEqual(rows[1]["count"], 2)

    def test_summary_without_revenue_has_zero_margin(self):
        summary = get_financial_summary(start="2026-03-01", end="2026-03-31")

        self.assertEqual(summary["revenue"], Decimal("0.00"))
        self.assertEqual(summary["expenses"], Decimal("2000.00"))
        self.assertEqual(summary["net_profit"], Decimal("-2000.00"))
        self.assertEqual(summary["profit_margin"], Decimal("0.00"))


class AccountingApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.cashier = User.objects.create_user(email="cashier@example.com", password="pass", role="cashier")
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")

    def test_cashier_cannot_post_expenses(self):
        self.client.force_authenticate(self.cashier)

        response = self.client.post(
            "/api/accounting/expenses/",
            {"category": "Misc", "description": "Snacks", "amount": "100.00"},
            format="json",
        )
        self.assertEqual(response.status_code, 403)

    def test_manager_records_expense_and_reads_balance(self):
        self.client.force_authenticate(self.manager)

        created = self.client.post(
            "/api/accounting/expenses/",
            {"category": "Misc", "description": "Snacks", "amount": "100.00"},
            format="json",
        )
        self.assertEqual(created.status_code, 201, created.data)

        balance = self.client.get("/api/accounting/cash-balance/")
        self.assertEqual(balance.status_code, 200)
        self.assertEqual(balance.data["balance"], Decimal("-100.00"))

    def test_bad_period_is_400(self):
        self.client.force_authenticate(self.manager)

        response = self.client.get("/api/accounting/financial-summary/", {"start_date": "03/01/2026"})
        self.assertEqual(response.status_code, 400)
