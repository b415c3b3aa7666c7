from decimal import Decimal

from django.test import SimpleTestCase

from sales.services.pricing import PricingError, compute_cart_totals, discount_value


class CartPricingTests(SimpleTestCase):
    """
    GUARANTEES:
    - Line discounts apply before the cart discount; tax applies last
    - Amount discounts are capped at their base
    - Every figure is rounded half-up to 2 places
    """

    def test_plain_cart(self):
        totals = compute_cart_totals(
            lines=[
                {"unit_price": "100.00", "quantity": 2},
                {"unit_price": "49.99", "quantity": 1},
            ],
            tax_rate="0",
        )

        self.assertEqual(totals["subtotal"], Decimal("249.99"))
        self.assertEqual(totals["total_amount"], Decimal("249.99"))

    def test_line_then_global_discount_then_tax(self):
        totals = compute_cart_totals(
            lines=[
                {"unit_price": "200.00", "quantity": 1, "discount": "10", "discount_type": "percentage"},
                {"unit_price": "50.00", "quantity": 2, "discount": "30", "discount_type": "amount"},
            ],
            global_discount="50",
            global_discount_type="amount",
            tax_rate="17",
        )

        # 180 + 70 = 250, less 50 = 200, tax 34
        self.assertEqual(totals["subtotal"], Decimal("250.00"))
        self.assertEqual(totals["discount_amount"], Decimal("50.00"))
        self.assertEqual(totals["tax_amount"], Decimal("34.00"))
        self.assertEqual(totals["total_amount"], Decimal("234.00"))
        self.assertEqual(totals["lines"][0]["discount_amount"], Decimal("20.00"))

    def test_extra_line_keys_carried_through(self):
        totals = compute_cart_totals(lines=[{"unit_price": "1.00", "quantity": 1, "sku": "X"}])
        self.assertEqual(totals["lines"][0]["sku"], "X")

    def test_half_up_rounding(self):
        totals = compute_cart_totals(lines=[{"unit_price": "0.05", "quantity": 1}], tax_rate="10")
        # 0.005 rounds up
        self.assertEqual(totals["tax_amount"], Decimal("0.01"))

    def test_amount_discount_capped(self):
        self.assertEqual(discount_value(base="30.00", discount="45", discount_type="amount"), Decimal("30.00"))

    def test_invalid_inputs(self):
        with self.assertRaises(PricingError):
            discount_value(base="10", discount="101", discount_type="percentage")
        with self.assertRaises(PricingError):
            discount_value(base="10", discount="-1")
        with self.assertRaises(PricingError):
            discount_value(base="10", discount="1", discount_type="bogo")
        with self.assertRaises(PricingError):
            compute_cart_totals(lines=[{"unit_price": "1.00", "quantity": 0}])
