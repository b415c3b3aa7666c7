# products/models/inventory_receipt.py

import uuid

from django.conf import settings
from django.db import models

from .product import Product


class InventoryReceipt(models.Model):
    """
    Snapshot of one stock intake and the cost averaging it caused.
    Written by products.services.inventory.receive_stock.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="inventory_receipts")

    quantity = models.PositiveIntegerField()
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2)
    total_cost = models.DecimalField(max_digits=14, decimal_places=2)

    previous_stock = models.IntegerField()
    previous_cost = models.DecimalField(max_digits=12, decimal_places=2)
    new_average_cost = models.DecimalField(max_digits=12, decimal_places=2)

    supplier_name = models.CharField(max_length=255, blank=True, default="")
    reference = models.CharField(max_length=64, blank=True, default="")
    notes = models.CharField(max_length=255, blank=True, default="")

    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="inventory_receipts",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.product_id} +{self.quantity} @ {self.unit_cost}"
