from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from accounting.models import CashLedgerEntry
from customers.models import Customer
from permissions.roles import CAP_REPORTS_VIEW, ROLE_CAPABILITIES
from products.models import Product, ProfitAnalysis, StockMovement
from products.services.inventory import receive_stock
from returns.models import RefundTransaction, Return
from returns.services.eligibility import check_return_eligibility
from returns.services.processing import ReturnError, process_return_and_refund
from returns.services.search import search_sales_for_returns
from sales.models import Sale
from sales.services.sale_service import create_sale

User = get_user_model()


@override_settings(DEFAULT_TAX_RATE="0", RETURN_WINDOW_DAYS=30)
class ReturnEligibilityTests(TestCase):
    """
    GUARANTEES:
    - Rules are checked in a fixed order; the first failure is reported
    - The window message names the configured number of days
    """

    def setUp(self):
        self.product = Product.objects.create(name="Shampoo", sale_price="500.00")
        receive_stock(product=self.product, quantity=10, unit_cost="350.00")
        self.customer = Customer.objects.create(name="Noor", credit_limit="2000.00")
        self.sale = create_sale(items=[{"product": self.product, "quantity": 2}])

    def test_eligible(self):
        result = check_return_eligibility(self.sale.id)

        self.assertTrue(result["eligible"])
        self.assertEqual(result["reason"], "Sale is eligible for return within 30-day window")
        self.assertEqual(result["days_since_sale"], 0)

    def test_unknown_sale(self):
        result = check_return_eligibility("00000000-0000-0000-0000-000000000000")
        self.assertEqual(result["reason"], "Sale not found")

    def test_unpaid_bnpl_sale_not_returnable(self):
        bnpl = create_sale(
            items=[{"product": self.product, "quantity": 1}],
            payment_method="bnpl",
            customer=self.customer,
        )

        result = check_return_eligibility(bnpl.id)

        self.assertFalse(result["eligible"])
        self.assertEqual(result["reason"], "Sale must be paid or partially paid to process returns")

    def test_window_expired(self):
        Sale.objects.filter(pk=self.sale.pk).update(sale_date=timezone.now() - timedelta(days=31))

        result = check_return_eligibility(self.sale.id)

        self.assertFalse(result["eligible"])
        self.assertEqual(result["reason"], "Return window has expired (30 days from sale date)")
        self.assertEqual(result["days_since_sale"], 31)

    def test_window_checked_before_items(self):
        process_return_and_refund(
            sale_id=self.sale.id,
            items=[{"sale_item_id": self.sale.items.get().id, "quantity": 2}],
            refund_method="cash",
            reason="Allergy",
        )
        Sale.objects.filter(pk=self.sale.pk).update(sale_date=timezone.now() - timedelta(days=40))

        result = check_return_eligibility(self.sale.id)
        self.assertIn("Return window has expired", result["reason"])

    def test_nothing_left_to_return(self):
        process_return_and_refund(
            sale_id=self.sale.id,
            items=[{"sale_item_id": self.sale.items.get().id, "quantity": 2}],
            refund_method="cash",
            reason="Allergy",
        )

        result = check_return_eligibility(self.sale.id)
        self.assertEqual(
            result["reason"],
            "No items available for return (all items may have been returned already)",
        )


@override_settings(DEFAULT_TAX_RATE="0")
class ProcessReturnTests(TestCase):
    """
    GUARANTEES:
    - Return, items, stock, refund and sale status commit together
    - Only good-condition units go back on the shelf
    - Cash refunds leave the till; store credit refunds go to the customer
    """

    def setUp(self):
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")
        self.customer = Customer.objects.create(name="Faisal", phone="0301")
        self.soap = Product.objects.create(name="Soap", sale_price="100.00")
        self.towel = Product.objects.create(name="Towel", sale_price="300.00")
        receive_stock(product=self.soap, quantity=10, unit_cost="60.00")
        receive_stock(product=self.towel, quantity=10, unit_cost="200.00")

        self.sale = create_sale(
            items=[{"product": self.soap, "quantity": 3}, {"product": self.towel, "quantity": 1}],
            customer=self.customer,
        )
        self.soap_line = self.sale.items.get(product=self.soap)
        self.towel_line = self.sale.items.get(product=self.towel)

    def test_partial_cash_return(self):
        ret = process_return_and_refund(
            sale_id=self.sale.id,
            items=[{"sale_item_id": self.soap_line.id, "quantity": 2}],
            refund_method="cash",
            reason="Wrong scent",
            user=self.manager,
        )

        self.assertTrue(ret.return_number.startswith("RET-"))
        self.assertEqual(ret.total_refund, Decimal("200.00"))

        self.soap.refresh_from_db()
        self.soap_line.refresh_from_db()
        self.sale.refresh_from_db()
        self.assertEqual(self.soap.stock_quantity, 9)
        self.assertEqual(self.soap_line.returned_quantity, 2)
        self.assertEqual(self.sale.return_status, Sale.RETURN_PARTIAL)

        self.assertTrue(
            StockMovement.objects.filter(reference_type="return", reference_id=str(ret.id), quantity=2).exists()
        )
        entry = CashLedgerEntry.objects.get(reference_type="return", reference_id=str(ret.id))
        self.assertEqual(entry.amount, Decimal("-200.00"))
        self.assertEqual(RefundTransaction.objects.get(return_record=ret).amount, Decimal("200.00"))

    def test_profit_snapshot_follows_sale_and_return(self):
        analysis = ProfitAnalysis.objects.get(product=self.soap)
        self.assertEqual(analysis.stock_quantity, 7)
        self.assertEqual(analysis.stock_value, Decimal("420.00"))

        process_return_and_refund(
            sale_id=self.sale.id,
            items=[{"sale_item_id": self.soap_line.id, "quantity": 2}],
            refund_method="cash",
            reason="Wrong scent",
        )

        analysis.refresh_from_db()
        self.assertEqual(analysis.stock_quantity, 9)
        self.assertEqual(analysis.stock_value, Decimal("540.00"))

    def test_damaged_units_not_restocked(self):
        ret = process_return_and_refund(
            sale_id=self.sale.id,
            items=[{"sale_item_id": self.towel_line.id, "quantity": 1, "condition": "damaged"}],
            refund_method="store_credit",
            reason="Torn",
        )

        self.towel.refresh_from_db()
        self.customer.refresh_from_db()
        self.assertEqual(self.towel.stock_quantity, 9)
        self.assertFalse(ret.items.get().restocked)
        self.assertEqual(self.customer.store_credit, Decimal("300.00"))
        self.assertEqual(CashLedgerEntry.objects.filter(entry_type="refund").count(), 0)

    def test_everything_back_marks_fully_returned(self):
        process_return_and_refund(
            sale_id=self.sale.id,
            items=[
                {"sale_item_id": self.soap_line.id, "quantity": 3},
                {"sale_item_id": self.towel_line.id, "quantity": 1},
            ],
            refund_method="bank_transfer",
            reason="Changed mind",
        )

        self.sale.refresh_from_db()
        self.assertEqual(self.sale.return_status, Sale.RETURN_FULL)

        with self.assertRaises(ReturnError):
            process_return_and_refund(
                sale_id=self.sale.id,
                items=[{"sale_item_id": self.soap_line.id, "quantity": 1}],
                refund_method="cash",
                reason="Again",
            )

    def test_over_return_rolls_back(self):
        with self.assertRaisesMessage(ReturnError, "Cannot return 4 of Soap; only 3 returnable"):
            process_return_and_refund(
                sale_id=self.sale.id,
                items=[
                    {"sale_item_id": self.towel_line.id, "quantity": 1},
                    {"sale_item_id": self.soap_line.id, "quantity": 4},
                ],
                refund_method="cash",
                reason="Bulk",
            )

        self.assertEqual(Return.objects.count(), 0)
        self.towel_line.refresh_from_db()
        self.assertEqual(self.towel_line.returned_quantity, 0)

    def test_validation_messages(self):
        line = [{"sale_item_id": self.soap_line.id, "quantity": 1}]

        with self.assertRaisesMessage(ReturnError, "Return reason is required"):
            process_return_and_refund(sale_id=self.sale.id, items=line, refund_method="cash", reason=" ")
        with self.assertRaises(ReturnError):
            process_return_and_refund(sale_id=self.sale.id, items=line, refund_method="voucher", reason="x")
        with self.assertRaises(ReturnError):
            process_return_and_refund(sale_id=self.sale.id, items=line * 2, refund_method="cash", reason="x")

    def test_store_credit_needs_customer(self):
        walk_in = create_sale(items=[{"product": self.soap, "quantity": 1}])

        with self.assertRaisesMessage(ReturnError, "require a registered customer"):
            process_return_and_refund(
                sale_id=walk_in.id,
                items=[{"sale_item_id": walk_in.items.get().id, "quantity": 1}],
                refund_method="store_credit",
                reason="x",
            )

        self.soap.refresh_from_db()
        self.assertEqual(self.soap.stock_quantity, 6)

    def test_search_by_customer_name(self):
        create_sale(items=[{"product": self.soap, "quantity": 1}])

        results = search_sales_for_returns(query="faisal")

        self.assertEqual([s.id for s in results], [self.sale.id])


@override_settings(DEFAULT_TAX_RATE="0")
class ReturnApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.cashier = User.objects.create_user(email="cashier@example.com", password="pass", role="cashier")
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")
        product = Product.objects.create(name="Kettle", sale_price="2500.00")
        receive_stock(product=product, quantity=2, unit_cost="1800.00")
        self.sale = create_sale(items=[{"product": product, "quantity": 1}])
        self.payload = {
            "sale_id": str(self.sale.id),
            "items": [{"sale_item_id": str(self.sale.items.get().id), "quantity": 1}],
            "refund_method": "cash",
            "reason": "Faulty switch",
        }

    def test_cashier_can_check_but_not_refund(self):
        self.client.force_authenticate(self.cashier)

        eligibility = self.client.get(f"/api/returns/sales/{self.sale.id}/eligibility/")
        self.assertEqual(eligibility.status_code, 200)
        self.assertTrue(eligibility.data["eligible"])

        self.assertEqual(self.client.post("/api/returns/", self.payload, format="json").status_code, 403)

    def test_manager_processes_return(self):
        self.client.force_authenticate(self.manager)

        response = self.client.post("/api/returns/", self.payload, format="json")

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["total_refund"], "2500.00")

        again = self.client.post("/api/returns/", self.payload, format="json")
        self.assertEqual(again.status_code, 400)

    def test_history_readable_with_reports_view_only(self):
        auditor = User.objects.create_user(email="auditor@example.com", password="pass", role="inventory")
        self.client.force_authenticate(auditor)

        self.assertEqual(self.client.get("/api/returns/").status_code, 403)

        with mock.patch.dict(ROLE_CAPABILITIES, {"inventory": {CAP_REPORTS_VIEW}}):
            self.assertEqual(self.client.get("/api/returns/").status_code, 200)
            self.assertEqual(self.client.post("/api/returns/", self.payload, format="json").status_code, 403)

    def test_cashier_cannot_list_returns(self):
        self.client.force_authenticate(self.cashier)

        self.assertEqual(self.client.get("/api/returns/").status_code, 403)
