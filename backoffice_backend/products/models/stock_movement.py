# products/models/stock_movement.py

"""
INVENTORY LEDGER

Immutable inventory ledger entry.

GUARANTEES:
- Append-only (no updates, no deletes)
- quantity is signed: IN > 0, OUT < 0, ADJUSTMENT either way (never 0)
- reference_type/reference_id point at the business document
  (sale, purchase order, return, damage report, manual adjustment)
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .product import Product


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        IN = "in", "Stock In"
        OUT = "out", "Stock Out"
        ADJUSTMENT = "adjustment", "Adjustment"

    class Reference(models.TextChoices):
        SALE = "sale", "Sale"
        PURCHASE = "purchase", "Purchase"
        RETURN = "return", "Customer Return"
        DAMAGE = "damage", "Damage"
        ADJUSTMENT = "adjustment", "Manual Adjustment"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="stock_movements")

    movement_type = models.CharField(max_length=12, choices=MovementType.choices)
    quantity = models.IntegerField()

    reference_type = models.CharField(max_length=20, choices=Reference.choices)
    reference_id = models.CharField(max_length=64, blank=True, default="")

    stock_after = models.IntegerField(null=True, blank=True)
    notes = models.CharField(max_length=255, blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="products_st_created_4f1a2e_idx"),
            models.Index(fields=["movement_type"], name="products_st_movemen_8c0d11_idx"),
            models.Index(fields=["product", "created_at"], name="products_st_product_61b7c9_idx"),
            models.Index(fields=["reference_type", "reference_id"], name="products_st_referen_d2e5a4_idx"),
        ]

    def clean(self):
        q = int(self.quantity or 0)
        if q == 0:
            raise ValidationError("quantity cannot be zero")
        if self.movement_type == self.MovementType.IN and q < 0:
            raise ValidationError("IN movements require a positive quantity")
        if self.movement_type == self.MovementType.OUT and q > 0:
            raise ValidationError("OUT movements require a negative quantity")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("StockMovement records are immutable and cannot be deleted")

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.movement_type} | {self.quantity}"
