# sales/models/sale_item.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class SaleItem(models.Model):
    """
    One sold line. returned_quantity is advanced only by returns.services.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="sale_items",
    )
    product_name = models.CharField(max_length=255, blank=True, default="")

    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_price = models.DecimalField(max_digits=12, decimal_places=2)

    returned_quantity = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gt=0), name="chk_sale_item_quantity_positive"),
            models.CheckConstraint(
                condition=models.Q(returned_quantity__lte=models.F("quantity")),
                name="chk_sale_item_returned_lte_sold",
            ),
        ]

    def clean(self):
        if (self.returned_quantity or 0) > (self.quantity or 0):
            raise ValidationError({"returned_quantity": "returned_quantity cannot exceed quantity"})

    def save(self, *args, **kwargs):
        if not self.product_name and self.product_id:
            self.product_name = self.product.name
        self.full_clean()
        super().save(*args, **kwargs)

    @property
    def returnable_quantity(self) -> int:
        return max(0, int(self.quantity or 0) - int(self.returned_quantity or 0))

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"
