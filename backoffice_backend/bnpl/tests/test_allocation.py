from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase

from bnpl.services.allocation import AllocationError, allocate, order_oldest_due_first


class AllocateTests(SimpleTestCase):
    """
    GUARANTEES:
    - Allocations never exceed any row's amount due
    - The allocated total equals the payment
    - Rows are filled strictly in the given order
    """

    def test_fills_in_order(self):
        plan = allocate([("a", Decimal("100.00")), ("b", Decimal("50.00")), ("c", Decimal("80.00"))], "120.00")
        self.assertEqual(plan, [("a", Decimal("100.00")), ("b", Decimal("20.00"))])

    def test_exact_total(self):
        plan = allocate([("a", Decimal("10.00")), ("b", Decimal("5.50"))], "15.50")
        self.assertEqual(sum(p for _, p in plan), Decimal("15.50"))
        self.assertEqual(len(plan), 2)

    def test_zero_due_rows_skipped(self):
        plan = allocate([("a", Decimal("0.00")), ("b", Decimal("5.00"))], "5")
        self.assertEqual(plan, [("b", Decimal("5.00"))])

    def test_overpayment_refused(self):
        with self.assertRaisesMessage(AllocationError, "exceeds total amount due 30.00"):
            allocate([("a", Decimal("10.00")), ("b", Decimal("20.00"))], "30.01")

    def test_invalid_inputs(self):
        with self.assertRaises(AllocationError):
            allocate([("a", Decimal("10.00"))], "0")
        with self.assertRaises(AllocationError):
            allocate([("a", Decimal("10.00")), ("a", Decimal("5.00"))], "1")
        with self.assertRaises(AllocationError):
            allocate([("a", Decimal("-1.00"))], "1")

    def test_sub_cent_payment_refused(self):
        with self.assertRaisesMessage(AllocationError, "more than 2 decimal places"):
            allocate([("a", Decimal("10.00"))], "9.995")
        with self.assertRaisesMessage(AllocationError, "must be a number"):
            allocate([("a", Decimal("10.00"))], "ten")

    def test_applied_sum_equals_payment(self):
        plan = allocate([("a", Decimal("10.00")), ("b", Decimal("10.00"))], "12.5")
        self.assertEqual(sum(portion for _, portion in plan), Decimal("12.50"))


class OldestDueFirstTests(SimpleTestCase):
    def test_sorts_by_due_then_created_with_missing_due_last(self):
        rows = [
            SimpleNamespace(name="no-due", due_date=None, created_at=None),
            SimpleNamespace(name="late", due_date=date(2026, 5, 1), created_at=None),
            SimpleNamespace(name="early", due_date=date(2026, 4, 1), created_at=None),
        ]

        ordered = order_oldest_due_first(rows)

        self.assertEqual([r.name for r in ordered], ["early", "late", "no-due"])
