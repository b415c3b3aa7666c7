from datetime import date, timedelta
from decimal import Decimal
from io import StringIO
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from accounting.models import CashLedgerEntry
from bnpl.models import BnplPayment, BnplTransaction
from bnpl.services import transactions as bnpl_transactions
from bnpl.services.summary import customer_bnpl_summary
from bnpl.services.transactions import (
    BnplPaymentError,
    apply_customer_payment,
    mark_overdue_transactions,
    process_bnpl_payment,
)
from customers.models import Customer
from products.models import Product
from products.services.inventory import receive_stock
from sales.models import Sale
from sales.services.sale_service import create_sale

User = get_user_model()


@override_settings(DEFAULT_TAX_RATE="0", BNPL_DUE_DAYS=30)
class BnplPaymentTests(TestCase):
    """
    GUARANTEES:
    - amount_paid + amount_due == original_amount after every payment
    - Customer balance and dues drop by exactly the amount applied
    - A multi-transaction payment is all-or-nothing, oldest due first
    - Cash repayments reach the cash ledger
    """

    def setUp(self):
        self.cashier = User.objects.create_user(email="cashier@example.com", password="pass", role="cashier")
        self.customer = Customer.objects.create(name="Kamran", phone="0345", credit_limit="5000.00")
        product = Product.objects.create(name="Rice 1kg", sale_price="100.00")
        receive_stock(product=product, quantity=100, unit_cost="70.00")

        first = create_sale(items=[{"product": product, "quantity": 3}], payment_method="bnpl", customer=self.customer)
        second = create_sale(items=[{"product": product, "quantity": 5}], payment_method="bnpl", customer=self.customer)
        self.older = first.bnpl_transaction
        self.newer = second.bnpl_transaction

        today = timezone.localdate()
        BnplTransaction.objects.filter(pk=self.older.pk).update(due_date=today - timedelta(days=3))
        BnplTransaction.objects.filter(pk=self.newer.pk).update(due_date=today + timedelta(days=10))

    # =====================================================
    # SINGLE TRANSACTION
    # =====================================================

    def test_partial_then_full_payment(self):
        process_bnpl_payment(transaction_id=self.newer.id, amount="200.00", user=self.cashier)

        self.newer.refresh_from_db()
        self.assertEqual(self.newer.status, BnplTransaction.STATUS_PARTIALLY_PAID)
        self.assertEqual(self.newer.amount_paid + self.newer.amount_due, self.newer.original_amount)
        self.assertEqual(self.newer.sale.payment_status, Sale.PAYMENT_STATUS_PARTIALLY_PAID)

        payment = process_bnpl_payment(transaction_id=self.newer.id, amount="300.00", payment_method="card")

        self.newer.refresh_from_db()
        self.assertEqual(self.newer.status, BnplTransaction.STATUS_PAID)
        self.assertEqual(payment.amount_due_after, Decimal("0.00"))
        self.assertEqual(payment.status_after, BnplTransaction.STATUS_PAID)
        self.assertEqual(Sale.objects.get(pk=self.newer.sale_id).payment_status, Sale.PAYMENT_STATUS_PAID)

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("300.00"))
        self.assertEqual(self.customer.available_credit, Decimal("4700.00"))

    def test_payment_on_past_due_row_stays_overdue(self):
        process_bnpl_payment(transaction_id=self.older.id, amount="100.00")

        self.older.refresh_from_db()
        self.assertEqual(self.older.status, BnplTransaction.STATUS_OVERDUE)

    def test_overpayment_refused(self):
        with self.assertRaisesMessage(BnplPaymentError, "Payment amount exceeds remaining due amount"):
            process_bnpl_payment(transaction_id=self.older.id, amount="300.01")

    def test_paid_transaction_refuses_more(self):
        process_bnpl_payment(transaction_id=self.older.id, amount="300.00")

        with self.assertRaisesMessage(BnplPaymentError, "already fully paid"):
            process_bnpl_payment(transaction_id=self.older.id, amount="1.00")

    def test_cash_repayment_hits_ledger(self):
        payment = process_bnpl_payment(transaction_id=self.older.id, amount="50.00")

        entry = CashLedgerEntry.objects.get(reference_type="bnpl_payment", reference_id=str(payment.id))
        self.assertEqual(entry.entry_type, CashLedgerEntry.TYPE_BNPL_PAYMENT)
        self.assertEqual(entry.amount, Decimal("50.00"))

    # =====================================================
    # CUSTOMER PAYMENT (ALLOCATED)
    # =====================================================

    def test_customer_payment_oldest_due_first(self):
        payments = apply_customer_payment(customer=self.customer, amount="450.00")

        self.assertEqual(
            [(p.transaction_id, p.amount) for p in payments],
            [(self.older.id, Decimal("300.00")), (self.newer.id, Decimal("150.00"))],
        )

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_outstanding_dues, Decimal("350.00"))

    def test_customer_overpayment_changes_nothing(self):
        with self.assertRaises(BnplPaymentError):
            apply_customer_payment(customer=self.customer, amount="900.00")

        self.assertEqual(BnplPayment.objects.count(), 0)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("800.00"))

    def test_customer_payment_failure_midway_rolls_back_everything(self):
        real_apply = bnpl_transactions._apply_payment
        calls = []

        def fail_on_second(**kwargs):
            calls.append(kwargs["txn"].id)
            if len(calls) == 2:
                raise RuntimeError("ledger unavailable")
            return real_apply(**kwargs)

        with mock.patch.object(bnpl_transactions, "_apply_payment", side_effect=fail_on_second):
            with self.assertRaises(RuntimeError):
                apply_customer_payment(customer=self.customer, amount="450.00")

        self.assertEqual(calls, [self.older.id, self.newer.id])
        self.assertEqual(BnplPayment.objects.count(), 0)
        self.assertFalse(CashLedgerEntry.objects.filter(entry_type=CashLedgerEntry.TYPE_BNPL_PAYMENT).exists())

        self.older.refresh_from_db()
        self.assertEqual(self.older.amount_due, Decimal("300.00"))
        self.assertEqual(self.older.amount_paid, Decimal("0.00"))

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("800.00"))
        self.assertEqual(self.customer.total_outstanding_dues, Decimal("800.00"))

    def test_customer_payment_restricted_to_selection(self):
        payments = apply_customer_payment(
            customer=self.customer,
            amount="100.00",
            transaction_ids=[self.newer.id],
        )

        self.assertEqual([p.transaction_id for p in payments], [self.newer.id])

        with self.assertRaises(BnplPaymentError):
            apply_customer_payment(customer=self.customer, amount="10.00", transaction_ids=[])

    # =====================================================
    # OVERDUE / SUMMARY
    # =====================================================

    def test_mark_overdue_only_touches_past_due_open_rows(self):
        self.assertEqual(mark_overdue_transactions(), 1)

        self.older.refresh_from_db()
        self.newer.refresh_from_db()
        self.assertEqual(self.older.status, BnplTransaction.STATUS_OVERDUE)
        self.assertEqual(self.newer.status, BnplTransaction.STATUS_PENDING)
        self.assertEqual(mark_overdue_transactions(), 0)

    def test_management_command(self):
        out = StringIO()
        future = (timezone.localdate() + timedelta(days=60)).isoformat()

        call_command("mark_overdue_bnpl", "--date", future, stdout=out)

        self.assertIn("Marked 2 BNPL transaction(s) overdue", out.getvalue())

    def test_customer_summary(self):
        summary = customer_bnpl_summary(customer=self.customer)

        self.assertEqual(summary["total_bnpl_amount"], Decimal("800.00"))
        self.assertEqual(summary["overdue_amount"], Decimal("300.00"))
        self.assertEqual(summary["active_transactions"], 2)


@override_settings(DEFAULT_TAX_RATE="0")
class BnplApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.cashier = User.objects.create_user(email="cashier@example.com", password="pass", role="cashier")
        self.clerk = User.objects.create_user(email="clerk@example.com", password="pass", role="inventory")
        self.customer = Customer.objects.create(name="Rabia", credit_limit="1000.00")
        product = Product.objects.create(name="Ghee", sale_price="400.00")
        receive_stock(product=product, quantity=5, unit_cost="300.00")
        self.sale = create_sale(items=[{"product": product, "quantity": 1}], payment_method="bnpl", customer=self.customer)

    def test_clerk_cannot_see_bnpl(self):
        self.client.force_authenticate(self.clerk)
        self.assertEqual(self.client.get("/api/bnpl/transactions/").status_code, 403)

    def test_cashier_collects_customer_payment(self):
        self.client.force_authenticate(self.cashier)

        response = self.client.post(
            f"/api/bnpl/customers/{self.customer.id}/pay/",
            {"amount": "150.00", "payment_method": "cash"},
            format="json",
        )

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["total_applied"], "150.00")
        self.assertEqual(response.data["remaining_dues"], "250.00")

    def test_overpayment_is_400(self):
        self.client.force_authenticate(self.cashier)
        txn = self.sale.bnpl_transaction

        response = self.client.post(
            f"/api/bnpl/transactions/{txn.id}/pay/",
            {"amount": "500.00"},
            format="json",
        )
        self.assertEqual(response.status_code, 400)

    def test_cashier_cannot_mark_overdue(self):
        self.client.force_authenticate(self.cashier)
        response = self.client.post("/api/bnpl/mark-overdue/", {"date": date.today().isoformat()}, format="json")
        self.assertEqual(response.status_code, 403)
