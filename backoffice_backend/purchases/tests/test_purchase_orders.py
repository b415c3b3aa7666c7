from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from products.models import InventoryReceipt, Product
from purchases.models import PurchaseItem, PurchaseOrder, Supplier
from purchases.services import purchase_orders
from purchases.services.purchase_orders import (
    PurchaseOrderError,
    cancel_purchase_order,
    create_purchase_order,
    receive_purchase_item,
    receive_purchase_order,
)

User = get_user_model()


class PurchaseOrderServiceTests(TestCase):
    """
    GUARANTEES:
    - Order total equals the sum of line totals
    - Receiving goes through stock intake (weighted average cost)
    - Status follows received quantities; only pending orders cancel
    """

    def setUp(self):
        self.user = User.objects.create_user(email="buyer@example.com", password="pass", role="inventory")
        self.supplier = Supplier.objects.create(name="Metro Wholesale")
        self.oil = Product.objects.create(name="Cooking Oil 1L", sale_price="600.00")
        self.sugar = Product.objects.create(name="Sugar 1kg", sale_price="180.00")

    def _order(self):
        return create_purchase_order(
            supplier=self.supplier,
            items=[
                {"product": self.oil, "quantity": 10, "unit_cost": "500.00"},
                {"product": self.sugar.id, "quantity": 20, "unit_cost": "150.00"},
            ],
            user=self.user,
        )

    def test_create_totals_and_number(self):
        order = self._order()

        self.assertEqual(order.total_amount, Decimal("8000.00"))
        self.assertEqual(order.status, PurchaseOrder.STATUS_PENDING)
        self.assertTrue(order.po_number.startswith("PO-"))
        self.assertEqual(order.items.count(), 2)

    def test_create_requires_items_and_active_supplier(self):
        with self.assertRaises(PurchaseOrderError):
            create_purchase_order(supplier=self.supplier, items=[])

        self.supplier.is_active = False
        self.supplier.save()
        with self.assertRaisesMessage(PurchaseOrderError, "Supplier not found"):
            self._order()

    def test_partial_then_full_receipt(self):
        order = self._order()
        oil_line = order.items.get(product=self.oil)

        order = receive_purchase_item(item_id=oil_line.id, quantity=4, user=self.user)
        self.assertEqual(order.status, PurchaseOrder.STATUS_PARTIALLY_RECEIVED)

        self.oil.refresh_from_db()
        self.assertEqual(self.oil.stock_quantity, 4)
        self.assertEqual(self.oil.cost_price, Decimal("500.00"))

        order = receive_purchase_order(order_id=order.id, user=self.user)
        self.assertEqual(order.status, PurchaseOrder.STATUS_RECEIVED)
        self.assertIsNotNone(order.received_date)

        self.oil.refresh_from_db()
        self.sugar.refresh_from_db()
        self.assertEqual(self.oil.stock_quantity, 10)
        self.assertEqual(self.sugar.stock_quantity, 20)
        self.assertEqual(InventoryReceipt.objects.filter(reference=order.po_number).count(), 3)

    def test_cannot_receive_more_than_outstanding(self):
        order = self._order()
        line = order.items.get(product=self.oil)

        with self.assertRaisesMessage(PurchaseOrderError, "only 10 outstanding"):
            receive_purchase_item(item_id=line.id, quantity=11)

    def test_item_receive_locks_order_before_item(self):
        order = self._order()
        line = order.items.get(product=self.oil)

        calls = []
        real_lock_order = purchase_orders._lock_order
        real_lock_item = PurchaseItem.objects.select_for_update

        def lock_order(order_id):
            calls.append("order")
            return real_lock_order(order_id)

        def lock_item(*args, **kwargs):
            calls.append("item")
            return real_lock_item(*args, **kwargs)

        with mock.patch.object(purchase_orders, "_lock_order", side_effect=lock_order), mock.patch.object(
            PurchaseItem.objects, "select_for_update", side_effect=lock_item
        ):
            receive_purchase_item(item_id=line.id, quantity=2)

        # same order as receive_purchase_order: order row, then item rows
        self.assertEqual(calls, ["order", "item"])
        line.refresh_from_db()
        self.assertEqual(line.received_quantity, 2)

    def test_unknown_item(self):
        with self.assertRaisesMessage(PurchaseOrderError, "Purchase item not found"):
            receive_purchase_item(item_id="00000000-0000-0000-0000-000000000000", quantity=1)

    def test_cancel_only_pending(self):
        order = self._order()
        cancel_purchase_order(order_id=order.id)

        order.refresh_from_db()
        self.assertEqual(order.status, PurchaseOrder.STATUS_CANCELLED)

        with self.assertRaises(PurchaseOrderError):
            receive_purchase_order(order_id=order.id)
        with self.assertRaises(PurchaseOrderError):
            cancel_purchase_order(order_id=order.id)


class PurchaseOrderApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.cashier = User.objects.create_user(email="cashier@example.com", password="pass", role="cashier")
        self.clerk = User.objects.create_user(email="clerk@example.com", password="pass", role="inventory")
        self.supplier = Supplier.objects.create(name="Metro Wholesale")
        self.product = Product.objects.create(name="Flour 10kg", sale_price="1400.00")

    def test_cashier_forbidden(self):
        self.client.force_authenticate(self.cashier)
        self.assertEqual(self.client.get("/api/purchases/orders/").status_code, 403)

    def test_create_and_receive(self):
        self.client.force_authenticate(self.clerk)

        created = self.client.post(
            "/api/purchases/orders/",
            {
                "supplier_id": str(self.supplier.id),
                "items": [{"product_id": str(self.product.id), "quantity": 5, "unit_cost": "1100.00"}],
            },
            format="json",
        )
        self.assertEqual(created.status_code, 201, created.data)

        received = self.client.post(f"/api/purchases/orders/{created.data['id']}/receive/")
        self.assertEqual(received.status_code, 200)
        self.assertEqual(received.data["status"], PurchaseOrder.STATUS_RECEIVED)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 5)

    def test_unknown_product_is_400(self):
        self.client.force_authenticate(self.clerk)

        response = self.client.post(
            "/api/purchases/orders/",
            {
                "supplier_id": str(self.supplier.id),
                "items": [{"product_id": "00000000-0000-0000-0000-000000000000", "quantity": 1, "unit_cost": "1.00"}],
            },
            format="json",
        )
        self.assertEqual(response.status_code, 400)
