from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

from django.test import TestCase, override_settings

from products.models import Product
from products.services.inventory import receive_stock
from sales.models import ReceiptReprint
from sales.services.receipts import (
    ReceiptError,
    build_authorization_code,
    daily_receipt_stats,
    log_receipt_reprint,
    mark_receipt_printed,
    receipt_audit_log,
    receipt_history,
    receipt_statistics,
)
from sales.services.sale_service import create_sale


@override_settings(DEFAULT_TAX_RATE="0")
class ReceiptTests(TestCase):
    """
    GUARANTEES:
    - Every reprint is recorded with a unique authorization code
    - Reprint counts are per receipt and increase by one
    - Unknown receipts are refused
    """

    def setUp(self):
        product = Product.objects.create(name="Soap", sale_price="80.00")
        receive_stock(product=product, quantity=20, unit_cost="60.00")
        self.cash_sale = create_sale(items=[{"product": product, "quantity": 1}])
        self.digital_sale = create_sale(items=[{"product": product, "quantity": 2}], payment_method="easypaisa")

    def test_authorization_code_format(self):
        at = datetime(2026, 3, 14, 10, 30, tzinfo=dt_timezone.utc)

        code = build_authorization_code(receipt_number="RCP-000001", count=2, at=at)

        self.assertRegex(code, r"^REPRINT-20260314-002-[0-9A-F]{6}$")

    def test_reprints_count_up(self):
        first = log_receipt_reprint(
            sale_id=self.cash_sale.id,
            receipt_number=self.cash_sale.receipt_number,
            reprinted_by="Manager One",
        )
        second = log_receipt_reprint(
            sale_id=self.cash_sale.id,
            receipt_number=self.cash_sale.receipt_number,
            reprinted_by="Manager Two",
            reason="Smudged",
        )

        self.assertEqual((first.reprint_count, second.reprint_count), (1, 2))
        self.assertNotEqual(first.authorization_code, second.authorization_code)
        self.assertEqual(second.reason, "Smudged")

        rows = receipt_audit_log(receipt_number=self.cash_sale.receipt_number)
        self.assertEqual([r["running_count"] for r in rows], [2, 1])

    def test_mismatched_receipt_number_refused(self):
        with self.assertRaisesMessage(ReceiptError, "Receipt not found"):
            log_receipt_reprint(
                sale_id=self.cash_sale.id,
                receipt_number=self.digital_sale.receipt_number,
                reprinted_by="X",
            )

    def test_reprinted_by_required(self):
        with self.assertRaises(ReceiptError):
            log_receipt_reprint(
                sale_id=self.cash_sale.id,
                receipt_number=self.cash_sale.receipt_number,
                reprinted_by="  ",
            )
        self.assertEqual(ReceiptReprint.objects.count(), 0)

    def test_statistics(self):
        mark_receipt_printed(sale=self.cash_sale)
        for name in ("A", "B", "A"):
            log_receipt_reprint(
                sale_id=self.cash_sale.id,
                receipt_number=self.cash_sale.receipt_number,
                reprinted_by=name,
            )

        stats = receipt_statistics()

        self.assertEqual(stats["total_receipts"], 2)
        self.assertEqual(stats["printed_receipts"], 1)
        self.assertEqual(stats["reprinted_receipts"], 1)
        self.assertEqual(stats["total_reprints"], 3)
        self.assertEqual(stats["unique_reprint_users"], 2)
        self.assertEqual(stats["most_reprinted_receipt"], self.cash_sale.receipt_number)
        self.assertEqual(stats["most_reprinted_count"], 3)

    def test_history_digital_group(self):
        rows = receipt_history(payment_method="digital")
        self.assertEqual([s.id for s in rows], [self.digital_sale.id])

    def test_daily_stats_groups_methods(self):
        stats = daily_receipt_stats()

        self.assertEqual(stats["total_receipts"], 2)
        self.assertEqual(stats["total_amount"], Decimal("240.00"))
        self.assertEqual(stats["average_amount"], Decimal("120.00"))
        self.assertEqual(stats["by_method"]["cash"]["amount"], Decimal("80.00"))
        self.assertEqual(stats["by_method"]["digital"]["count"], 1)
        self.assertEqual(stats["by_method"]["bnpl"]["count"], 0)
