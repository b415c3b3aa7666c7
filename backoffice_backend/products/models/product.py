# products/models/product.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from .category import Category


def validate_barcode(value: str) -> None:
    """Barcodes are 8-13 digits (EAN-8 through EAN-13, UPC-A)."""
    if not value:
        return
    if not value.isdigit():
        raise ValidationError("Barcode must contain digits only")
    if not 8 <= len(value) <= 13:
        raise ValidationError("Barcode must be between 8 and 13 digits")


class Product(models.Model):
    """
    Sellable product.

    STOCK MODEL:
    - stock_quantity is the on-hand count, mutated ONLY by products.services.inventory
    - every mutation writes a StockMovement row
    - cost_price is the weighted average cost of units on hand
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )

    name = models.CharField(max_length=255, db_index=True)
    sku = models.CharField(max_length=128, unique=True, null=True, blank=True)
    barcode = models.CharField(
        max_length=13,
        unique=True,
        null=True,
        blank=True,
        validators=[validate_barcode],
    )
    description = models.TextField(blank=True)

    cost_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    sale_price = models.DecimalField(max_digits=12, decimal_places=2)

    stock_quantity = models.IntegerField(default=0)
    min_stock_level = models.PositiveIntegerField(default=10)

    expiry_date = models.DateField(null=True, blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="products_pr_name_9ff0a3_idx"),
            models.Index(fields=["expiry_date"], name="products_pr_expiry__2bb3f1_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(stock_quantity__gte=0),
                name="chk_product_stock_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(cost_price__gte=0) & Q(sale_price__gte=0),
                name="chk_product_prices_non_negative",
            ),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        self.barcode = (self.barcode or "").strip() or None
        self.sku = (self.sku or "").strip() or None

        if self.sale_price is None or Decimal(self.sale_price) < 0:
            raise ValidationError("Sale price must be zero or more")
        if self.cost_price is not None and Decimal(self.cost_price) < 0:
            raise ValidationError("Cost price cannot be negative")
        if self.stock_quantity is not None and self.stock_quantity < 0:
            raise ValidationError("Stock cannot be negative")

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    @property
    def is_out_of_stock(self) -> bool:
        return int(self.stock_quantity or 0) <= 0

    @property
    def is_low_stock(self) -> bool:
        qty = int(self.stock_quantity or 0)
        return 0 < qty <= int(self.min_stock_level or 0)

    @property
    def is_expired(self) -> bool:
        return bool(self.expiry_date and self.expiry_date < timezone.localdate())

    @property
    def is_near_expiry(self) -> bool:
        if not self.expiry_date or self.is_expired:
            return False
        days = int(getattr(settings, "NEAR_EXPIRY_DAYS", 30))
        return (self.expiry_date - timezone.localdate()).days <= days
