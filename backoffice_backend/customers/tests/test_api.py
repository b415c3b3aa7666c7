from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from customers.models import Customer

User = get_user_model()


class CustomerApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.cashier = User.objects.create_user(email="cashier@example.com", password="pass", role="cashier")
        self.clerk = User.objects.create_user(email="clerk@example.com", password="pass", role="inventory")
        self.customer = Customer.objects.create(name="Sana", phone="0311", credit_limit="1000.00")

    def test_inventory_clerk_has_no_customer_access(self):
        self.client.force_authenticate(self.clerk)
        self.assertEqual(self.client.get("/api/customers/").status_code, 403)

    def test_cashier_creates_customer_with_balances_read_only(self):
        self.client.force_authenticate(self.cashier)

        response = self.client.post(
            "/api/customers/",
            {"name": "Omar", "phone": "0322", "credit_limit": "2500.00", "store_credit": "999.00"},
            format="json",
        )

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["available_credit"], "2500.00")
        self.assertEqual(response.data["store_credit"], "0.00")

    def test_credit_limit_cannot_drop_below_balance(self):
        self.customer.current_balance = "800.00"
        self.customer.save()
        self.client.force_authenticate(self.cashier)

        response = self.client.patch(
            f"/api/customers/{self.customer.id}/", {"credit_limit": "500.00"}, format="json"
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("credit_limit", response.data)

    def test_credit_check(self):
        self.client.force_authenticate(self.cashier)

        response = self.client.post(
            f"/api/customers/{self.customer.id}/credit-check/", {"amount": "1500.00"}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data["approved"])

    def test_search_and_summary(self):
        Customer.objects.create(name="Zara", phone="0999")
        self.client.force_authenticate(self.cashier)

        response = self.client.get("/api/customers/", {"search": "san"})
        self.assertEqual([row["name"] for row in response.data["results"]], ["Sana"])

        summary = self.client.get(f"/api/customers/{self.customer.id}/summary/")
        self.assertEqual(summary.status_code, 200)
        self.assertEqual(summary.data["purchase_count"], 0)
        self.assertEqual(str(summary.data["available_credit"]), "1000.00")

    def test_delete_deactivates(self):
        self.client.force_authenticate(self.cashier)

        response = self.client.delete(f"/api/customers/{self.customer.id}/")

        self.assertEqual(response.status_code, 204)
        self.customer.refresh_from_db()
        self.assertFalse(self.customer.is_active)
