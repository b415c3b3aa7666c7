from decimal import Decimal

from django.test import TestCase

from customers.models import Customer
from customers.services.credit import (
    CustomerCreditError,
    add_store_credit,
    charge_credit,
    check_customer_credit,
    settle_credit,
    spend_store_credit,
)
from customers.services.loyalty import award_loyalty_points, calculate_loyalty_points
from store.models import LoyaltyRule


class CustomerCreditTests(TestCase):
    """
    GUARANTEES:
    - available_credit = credit_limit - current_balance after every save
    - Charges beyond available credit are refused
    - Balances never go negative
    """

    def setUp(self):
        self.customer = Customer.objects.create(name="Amina", phone="0300", credit_limit="5000.00")

    def test_available_credit_derived_on_create(self):
        self.assertEqual(self.customer.available_credit, Decimal("5000.00"))

    def test_check_credit(self):
        self.assertTrue(check_customer_credit(customer=self.customer, amount="5000.00"))
        self.assertFalse(check_customer_credit(customer=self.customer, amount="5000.01"))

    def test_inactive_customer_has_no_credit(self):
        self.customer.is_active = False
        self.customer.save()

        self.assertFalse(check_customer_credit(customer=self.customer, amount="1.00"))

    def test_charge_and_settle(self):
        charge_credit(customer=self.customer, amount="1200.00")
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("1200.00"))
        self.assertEqual(self.customer.total_outstanding_dues, Decimal("1200.00"))
        self.assertEqual(self.customer.available_credit, Decimal("3800.00"))

        settle_credit(customer=self.customer, amount="2000.00")
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("0.00"))
        self.assertEqual(self.customer.available_credit, Decimal("5000.00"))

    def test_charge_over_limit_refused(self):
        with self.assertRaises(CustomerCreditError):
            charge_credit(customer=self.customer, amount="6000.00")

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("0.00"))

    def test_store_credit_round_trip(self):
        add_store_credit(customer=self.customer, amount="300.00")
        spend_store_credit(customer=self.customer, amount="120.00")

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.store_credit, Decimal("180.00"))

        with self.assertRaises(CustomerCreditError):
            spend_store_credit(customer=self.customer, amount="500.00")


class LoyaltyPointsTests(TestCase):
    def test_default_rate_is_one_point_per_unit(self):
        self.assertEqual(calculate_loyalty_points("249.90"), 249)

    def test_highest_reached_rule_applies(self):
        LoyaltyRule.objects.create(name="Base", points_per_currency="1.0000", min_purchase_amount="0.00")
        LoyaltyRule.objects.create(name="Big basket", points_per_currency="2.0000", min_purchase_amount="1000.00")

        self.assertEqual(calculate_loyalty_points("500.00"), 500)
        self.assertEqual(calculate_loyalty_points("1000.00"), 2000)

    def test_award_updates_customer(self):
        customer = Customer.objects.create(name="Bilal")

        points = award_loyalty_points(customer=customer, amount="75.50")

        customer.refresh_from_db()
        self.assertEqual(points, 75)
        self.assertEqual(customer.loyalty_points, 75)
        self.assertEqual(award_loyalty_points(customer=customer, amount="0"), 0)
