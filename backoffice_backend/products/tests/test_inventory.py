from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase

from products.models import DamageReport, InventoryReceipt, Product, ProfitAnalysis, StockMovement
from products.services.damage import (
    DamageReportError,
    approve_damage_report,
    create_damage_report,
    reject_damage_report,
)
from products.services.inventory import (
    InsufficientStockError,
    InventoryError,
    adjust_stock,
    deduct_stock,
    receive_stock,
    restore_stock,
    weighted_average_cost,
)
from products.services.profit import compute_profit_figures

User = get_user_model()


class StockServiceTests(TestCase):
    """
    GUARANTEES:
    - Every stock change writes one StockMovement with a signed quantity
    - Receiving re-averages cost_price
    - Stock never goes negative
    """

    def setUp(self):
        self.user = User.objects.create_user(email="stock@example.com", password="pass", role="inventory")
        self.product = Product.objects.create(name="Rice 5kg", sku="RICE-5", sale_price="1500.00")

    # =====================================================
    # RECEIVE
    # =====================================================

    def test_first_receipt_sets_cost_to_unit_cost(self):
        receipt = receive_stock(product=self.product, quantity=10, unit_cost="1000.00", user=self.user)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)
        self.assertEqual(self.product.cost_price, Decimal("1000.00"))
        self.assertEqual(receipt.previous_stock, 0)
        self.assertEqual(receipt.total_cost, Decimal("10000.00"))

    def test_second_receipt_uses_weighted_average(self):
        receive_stock(product=self.product, quantity=10, unit_cost="1000.00")
        receipt = receive_stock(product=self.product, quantity=30, unit_cost="1200.00")

        self.product.refresh_from_db()
        # (10*1000 + 30*1200) / 40 = 1150
        self.assertEqual(self.product.cost_price, Decimal("1150.00"))
        self.assertEqual(receipt.new_average_cost, Decimal("1150.00"))
        self.assertEqual(InventoryReceipt.objects.filter(product=self.product).count(), 2)

    def test_receipt_writes_in_movement_referenced_purchase(self):
        receive_stock(product=self.product, quantity=4, unit_cost="900.00", reference="PO-1")

        movement = StockMovement.objects.get(product=self.product)
        self.assertEqual(movement.movement_type, StockMovement.MovementType.IN)
        self.assertEqual(movement.quantity, 4)
        self.assertEqual(movement.reference_type, StockMovement.Reference.PURCHASE)
        self.assertEqual(movement.reference_id, "PO-1")
        self.assertEqual(movement.stock_after, 4)

    def test_receipt_refreshes_profit_analysis(self):
        receive_stock(product=self.product, quantity=2, unit_cost="1000.00")

        row = ProfitAnalysis.objects.get(product=self.product)
        self.assertEqual(row.stock_value, Decimal("2000.00"))
        self.assertEqual(row.profit_per_unit, Decimal("500.00"))
        self.assertEqual(row.profit_margin, Decimal("33.33"))

    def test_receive_rejects_zero_quantity(self):
        with self.assertRaises(InventoryError):
            receive_stock(product=self.product, quantity=0, unit_cost="10.00")

    def test_weighted_average_with_empty_stock(self):
        self.assertEqual(
            weighted_average_cost(current_stock=0, current_cost="50.00", quantity=5, unit_cost="70.00"),
            Decimal("70.00"),
        )

    # =====================================================
    # DEDUCT / RESTORE / ADJUST
    # =====================================================

    def test_deduct_writes_negative_out_movement(self):
        receive_stock(product=self.product, quantity=5, unit_cost="1000.00")

        movement = deduct_stock(
            product=self.product,
            quantity=3,
            reference_type=StockMovement.Reference.SALE,
            reference_id="sale-1",
        )

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 2)
        self.assertEqual(movement.quantity, -3)
        self.assertEqual(movement.movement_type, StockMovement.MovementType.OUT)

    def test_deduct_more_than_available_fails_without_change(self):
        receive_stock(product=self.product, quantity=2, unit_cost="1000.00")

        with self.assertRaises(InsufficientStockError):
            deduct_stock(product=self.product, quantity=3, reference_type=StockMovement.Reference.SALE)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 2)
        self.assertEqual(StockMovement.objects.filter(movement_type="out").count(), 0)

    def test_restore_adds_stock(self):
        restore_stock(product=self.product, quantity=2, reference_type=StockMovement.Reference.RETURN)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 2)

    def test_deduct_and_restore_refresh_profit_analysis(self):
        receive_stock(product=self.product, quantity=10, unit_cost="700.00")

        deduct_stock(product=self.product, quantity=4, reference_type=StockMovement.Reference.SALE)

        row = ProfitAnalysis.objects.get(product=self.product)
        self.assertEqual(row.stock_quantity, 6)
        self.assertEqual(row.stock_value, Decimal("4200.00"))

        restore_stock(product=self.product, quantity=1, reference_type=StockMovement.Reference.RETURN)

        row.refresh_from_db()
        self.assertEqual(row.stock_quantity, 7)
        self.assertEqual(row.stock_value, Decimal("4900.00"))

    def test_adjust_records_signed_delta(self):
        receive_stock(product=self.product, quantity=10, unit_cost="1000.00")

        movement = adjust_stock(product=self.product, new_quantity=7, notes="Count")

        self.assertEqual(movement.quantity, -3)
        self.assertEqual(movement.movement_type, StockMovement.MovementType.ADJUSTMENT)
        self.assertIsNone(adjust_stock(product=self.product, new_quantity=7))

    def test_movements_are_immutable(self):
        movement = restore_stock(product=self.product, quantity=1, reference_type=StockMovement.Reference.RETURN)
        movement.notes = "edited"

        with self.assertRaises(ValidationError):
            movement.save()


class DamageReportTests(TestCase):
    def setUp(self):
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")
        self.product = Product.objects.create(name="Eggs (dozen)", sale_price="400.00")
        receive_stock(product=self.product, quantity=5, unit_cost="300.00")

    def test_approve_deducts_stock_with_damage_reference(self):
        report = create_damage_report(product=self.product, quantity=2, reason="Cracked", user=self.manager)

        approve_damage_report(report_id=report.id, user=self.manager)

        self.product.refresh_from_db()
        report.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 3)
        self.assertEqual(report.status, DamageReport.STATUS_APPROVED)
        self.assertTrue(
            StockMovement.objects.filter(
                reference_type=StockMovement.Reference.DAMAGE,
                reference_id=str(report.id),
                quantity=-2,
            ).exists()
        )

    def test_approve_with_insufficient_stock_keeps_report_pending(self):
        report = create_damage_report(product=self.product, quantity=9, reason="Flood")

        with self.assertRaises(DamageReportError):
            approve_damage_report(report_id=report.id)

        report.refresh_from_db()
        self.assertEqual(report.status, DamageReport.STATUS_PENDING)

    def test_processed_report_cannot_be_reviewed_again(self):
        report = create_damage_report(product=self.product, quantity=1, reason="Torn")
        reject_damage_report(report_id=report.id)

        with self.assertRaisesMessage(DamageReportError, "Damage report not found or already processed"):
            approve_damage_report(report_id=report.id)


class ProfitFigureTests(TestCase):
    def test_zero_sale_price_has_zero_margin(self):
        figures = compute_profit_figures(cost_price="10.00", sale_price="0", stock_quantity=3)

        self.assertEqual(figures["profit_margin"], Decimal("0.00"))
        self.assertEqual(figures["stock_value"], Decimal("30.00"))
