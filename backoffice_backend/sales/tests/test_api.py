from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from products.models import Product
from products.services.inventory import receive_stock
from sales.models import Sale

User = get_user_model()


@override_settings(DEFAULT_TAX_RATE="0")
class SalesApiTests(TestCase):
    """
    GUARANTEES:
    - Checkout errors use the {"error": {"code", "message"}} envelope
    - Reprints need receipts.reprint (managers, not cashiers)
    """

    def setUp(self):
        self.client = APIClient()
        self.cashier = User.objects.create_user(email="cashier@example.com", password="pass", role="cashier")
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")
        self.clerk = User.objects.create_user(email="clerk@example.com", password="pass", role="inventory")
        self.product = Product.objects.create(name="Tea 500g", sale_price="700.00")
        receive_stock(product=self.product, quantity=3, unit_cost="500.00")

    def _payload(self, quantity=1, **extra):
        return {"items": [{"product_id": str(self.product.id), "quantity": quantity}], **extra}

    def test_cashier_creates_sale(self):
        self.client.force_authenticate(self.cashier)

        response = self.client.post("/api/sales/", self._payload(2, amount_tendered="1500.00"), format="json")

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["total_amount"], "1400.00")
        self.assertEqual(response.data["change_amount"], "100.00")
        self.assertEqual(len(response.data["items"]), 1)
        self.assertEqual(response.data["payment_group"], "cash")

    def test_inventory_clerk_cannot_sell(self):
        self.client.force_authenticate(self.clerk)

        response = self.client.post("/api/sales/", self._payload(), format="json")
        self.assertEqual(response.status_code, 403)

    def test_insufficient_stock_envelope(self):
        self.client.force_authenticate(self.cashier)

        response = self.client.post("/api/sales/", self._payload(5), format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "insufficient_stock")
        self.assertIn("Tea 500g: Requested 5, Available 3", response.data["error"]["message"])

    def test_bnpl_without_customer_envelope(self):
        self.client.force_authenticate(self.cashier)

        response = self.client.post("/api/sales/", self._payload(payment_method="bnpl"), format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "payment_invalid")

    def test_quote(self):
        self.client.force_authenticate(self.cashier)

        response = self.client.post(
            "/api/sales/quote/",
            self._payload(2, global_discount="100.00", global_discount_type="amount"),
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(str(response.data["total_amount"]), "1300.00")
        self.assertEqual(Sale.objects.count(), 0)

    def test_reprint_permissions_and_not_found(self):
        self.client.force_authenticate(self.cashier)
        created = self.client.post("/api/sales/", self._payload(), format="json")
        sale_id = created.data["id"]
        receipt = created.data["receipt_number"]
        url = f"/api/sales/{sale_id}/reprint/"

        self.assertEqual(self.client.post(url, {"receipt_number": receipt}, format="json").status_code, 403)

        self.client.force_authenticate(self.manager)
        response = self.client.post(url, {"receipt_number": receipt}, format="json")
        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["reprint_count"], 1)
        self.assertEqual(response.data["reprinted_by"], "manager@example.com")

        missing = self.client.post(url, {"receipt_number": "RCP-999999"}, format="json")
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.data["error"]["code"], "receipt_not_found")

    def test_list_rejects_bad_period(self):
        self.client.force_authenticate(self.manager)

        response = self.client.get("/api/sales/", {"start_date": "yesterday"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "invalid_period")
