from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from customers.models import Customer
from products.models import Product
from products.services.inventory import receive_stock
from reports.services.dashboard import critical_products, dashboard_summary
from reports.services.sales_analytics import (
    daily_sales,
    sales_summary_metrics,
    sales_trend,
    top_products,
)
from sales.services.sale_service import create_sale
from store.services.periods import PeriodError

User = get_user_model()


@override_settings(DEFAULT_TAX_RATE="0")
class DashboardTests(TestCase):
    """
    GUARANTEES:
    - Today's and the month's totals count only sales in range
    - Inventory alerts use the same rules as the stock_state filter
    - Critical products carry readable issues, emptiest first
    """

    def setUp(self):
        self.today = timezone.localdate()

        self.rice = Product.objects.create(name="Rice 1kg", sale_price="100.00")
        receive_stock(product=self.rice, quantity=100, unit_cost="70.00")

        self.sugar = Product.objects.create(name="Sugar 1kg", sale_price="150.00")
        receive_stock(product=self.sugar, quantity=5, unit_cost="120.00")

        self.salt = Product.objects.create(name="Salt", sale_price="40.00")

        self.milk = Product.objects.create(
            name="Milk 1L",
            sale_price="200.00",
            expiry_date=self.today - timedelta(days=2),
        )
        receive_stock(product=self.milk, quantity=50, unit_cost="150.00")

        self.customer = Customer.objects.create(name="Sana", phone="0333", credit_limit="1000.00")

        create_sale(items=[{"product": self.rice, "quantity": 2}])
        create_sale(items=[{"product": self.rice, "quantity": 1}], customer=self.customer)

    def test_sales_block(self):
        data = dashboard_summary(today=self.today)

        self.assertEqual(data["date"], self.today)
        self.assertEqual(data["sales"]["today_count"], 2)
        self.assertEqual(data["sales"]["today_total"], Decimal("300.00"))
        self.assertEqual(data["sales"]["month_count"], 2)
        self.assertEqual(data["sales"]["month_total"], Decimal("300.00"))
        self.assertEqual(data["sales"]["average_order_value"], Decimal("150.00"))

    def test_other_day_has_no_sales_today(self):
        data = dashboard_summary(today=self.today + timedelta(days=40))

        self.assertEqual(data["sales"]["today_count"], 0)
        self.assertEqual(data["sales"]["today_total"], Decimal("0.00"))

    def test_inventory_block(self):
        inventory = dashboard_summary(today=self.today)["inventory"]

        self.assertEqual(inventory["total_products"], 4)
        self.assertEqual(inventory["low_stock"], 1)
        self.assertEqual(inventory["out_of_stock"], 1)
        self.assertEqual(inventory["expired"], 1)
        self.assertEqual(inventory["near_expiry"], 0)

    def test_customer_block(self):
        customers = dashboard_summary(today=self.today)["customers"]

        self.assertEqual(customers["total"], 1)
        self.assertEqual(customers["outstanding_dues"], Decimal("0.00"))
        self.customer.refresh_from_db()
        self.assertEqual(customers["loyalty_points"], self.customer.loyalty_points)

    def test_critical_products_issues(self):
        rows = critical_products(today=self.today)

        self.assertEqual([r["name"] for r in rows], ["Salt", "Sugar 1kg", "Milk 1L"])
        issues = {r["name"]: r["issues"] for r in rows}
        self.assertEqual(issues["Salt"], ["Out of stock"])
        self.assertEqual(issues["Sugar 1kg"], ["Low stock"])
        self.assertEqual(issues["Milk 1L"], ["Expired"])

    def test_inactive_products_are_not_critical(self):
        self.salt.is_active = False
        self.salt.save(update_fields=["is_active"])

        names = [r["name"] for r in critical_products(today=self.today)]
        self.assertNotIn("Salt", names)


@override_settings(DEFAULT_TAX_RATE="0")
class SalesAnalyticsTests(TestCase):
    """
    GUARANTEES:
    - group_by is restricted to hour / day / month
    - Top products rank by quantity and by revenue separately
    - Daily sales always returns 24 hourly buckets
    """

    def setUp(self):
        self.today = timezone.localdate()
        self.tea = Product.objects.create(name="Tea 200g", sale_price="500.00")
        self.soap = Product.objects.create(name="Soap", sale_price="50.00")
        receive_stock(product=self.tea, quantity=20, unit_cost="400.00")
        receive_stock(product=self.soap, quantity=20, unit_cost="30.00")

        self.first = create_sale(items=[{"product": self.soap, "quantity": 4}])
        self.second = create_sale(
            items=[
                {"product": self.tea, "quantity": 1},
                {"product": self.soap, "quantity": 2},
            ],
            payment_method="card",
        )

    def test_trend_rejects_unknown_grouping(self):
        with self.assertRaises(PeriodError):
            sales_trend(group_by="week")

    def test_trend_by_day(self):
        rows = sales_trend(start=self.today.isoformat(), end=self.today.isoformat(), group_by="day")

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["transactions"], 2)
        self.assertEqual(rows[0]["revenue"], Decimal("800.00"))
        self.assertEqual(rows[0]["items_sold"], 7)

    def test_summary_metrics(self):
        data = sales_summary_metrics()

        self.assertEqual(data["total_revenue"], Decimal("800.00"))
        self.assertEqual(data["total_transactions"], 2)
        self.assertEqual(data["average_order_value"], Decimal("400.00"))
        self.assertEqual(data["items_sold"], 7)
        self.assertEqual(data["revenue_by_payment_method"]["cash"], Decimal("200.00"))
        self.assertEqual(data["revenue_by_payment_method"]["card"], Decimal("600.00"))

    def test_summary_outside_period_is_empty(self):
        past = (self.today - timedelta(days=30)).isoformat()
        data = sales_summary_metrics(start=past, end=past)

        self.assertEqual(data["total_transactions"], 0)
        self.assertEqual(data["average_order_value"], Decimal("0.00"))

    def test_top_products_rankings(self):
        data = top_products()

        self.assertEqual(data["by_quantity"][0]["name"], "Soap")
        self.assertEqual(data["by_quantity"][0]["quantity"], 6)
        self.assertEqual(data["by_revenue"][0]["name"], "Tea 200g")
        self.assertEqual(data["by_revenue"][0]["revenue"], Decimal("500.00"))

    def test_top_products_limit(self):
        data = top_products(limit=1)

        self.assertEqual(len(data["by_quantity"]), 1)
        self.assertEqual(len(data["by_revenue"]), 1)

    def test_daily_sales_buckets(self):
        data = daily_sales(day=self.today)

        self.assertEqual(len(data["hours"]), 24)
        self.assertEqual(data["total_transactions"], 2)
        self.assertEqual(data["total_revenue"], Decimal("800.00"))
        self.assertEqual(data["peak_hour"], timezone.localtime(self.second.sale_date).hour)

    def test_daily_sales_empty_day(self):
        data = daily_sales(day=self.today - timedelta(days=5))

        self.assertEqual(data["total_transactions"], 0)
        self.assertIsNone(data["peak_hour"])


@override_settings(DEFAULT_TAX_RATE="0")
class ReportsApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.cashier = User.objects.create_user(email="cashier@example.com", password="pass", role="cashier")
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")

    def test_cashier_cannot_view_reports(self):
        self.client.force_authenticate(self.cashier)

        res = self.client.get("/api/reports/dashboard/")
        self.assertEqual(res.status_code, 403)

    def test_manager_sees_dashboard(self):
        self.client.force_authenticate(self.manager)

        res = self.client.get("/api/reports/dashboard/")
        self.assertEqual(res.status_code, 200)
        self.assertIn("critical_products", res.data)

    def test_bad_date_is_rejected(self):
        self.client.force_authenticate(self.manager)

        res = self.client.get("/api/reports/daily-sales/", {"date": "bad"})
        self.assertEqual(res.status_code, 400)
        self.assertIn("detail", res.data)

    def test_bad_grouping_is_rejected(self):
        self.client.force_authenticate(self.manager)

        res = self.client.get("/api/reports/sales-trend/", {"group_by": "week"})
        self.assertEqual(res.status_code, 400)

    def test_top_products_limit_must_be_integer(self):
        self.client.force_authenticate(self.manager)

        res = self.client.get("/api/reports/top-products/", {"limit": "ten"})
        self.assertEqual(res.status_code, 400)

    def test_unauthenticated_request_rejected(self):
        res = self.client.get("/api/reports/sales-summary/")
        self.assertEqual(res.status_code, 401)
