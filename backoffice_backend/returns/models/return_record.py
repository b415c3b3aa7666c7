# returns/models/return_record.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class Return(models.Model):
    """
    One processed customer return against a single sale.
    Written once by returns.services.processing; never edited.
    """

    REFUND_CASH = "cash"
    REFUND_BANK_TRANSFER = "bank_transfer"
    REFUND_STORE_CREDIT = "store_credit"
    REFUND_EXCHANGE = "exchange"

    REFUND_METHODS = [
        (REFUND_CASH, "Cash"),
        (REFUND_BANK_TRANSFER, "Bank Transfer"),
        (REFUND_STORE_CREDIT, "Store Credit"),
        (REFUND_EXCHANGE, "Exchange"),
    ]

    CASH_OUT_METHODS = {REFUND_CASH, REFUND_BANK_TRANSFER}
    CREDIT_METHODS = {REFUND_STORE_CREDIT, REFUND_EXCHANGE}

    STATUS_COMPLETED = "completed"
    STATUSES = [(STATUS_COMPLETED, "Completed")]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    return_number = models.CharField(max_length=32, unique=True)

    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.PROTECT,
        related_name="returns",
    )
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="returns",
    )

    reason = models.CharField(max_length=255)
    refund_method = models.CharField(max_length=20, choices=REFUND_METHODS)
    total_refund = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_COMPLETED)

    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="processed_returns",
    )
    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="returns_ret_created_6b0e1d_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(total_refund__gte=0), name="chk_return_total_non_negative"),
        ]

    def __str__(self):
        return f"{self.return_number} ({self.total_refund})"


class ReturnItem(models.Model):
    CONDITION_GOOD = "good"
    CONDITION_DAMAGED = "damaged"
    CONDITION_DEFECTIVE = "defective"

    CONDITIONS = [
        (CONDITION_GOOD, "Good"),
        (CONDITION_DAMAGED, "Damaged"),
        (CONDITION_DEFECTIVE, "Defective"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    return_record = models.ForeignKey(
        "returns.Return",
        on_delete=models.CASCADE,
        related_name="items",
    )
    sale_item = models.ForeignKey(
        "sales.SaleItem",
        on_delete=models.PROTECT,
        related_name="return_items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="return_items",
    )

    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    refund_amount = models.DecimalField(max_digits=12, decimal_places=2)
    condition = models.CharField(max_length=20, choices=CONDITIONS, default=CONDITION_GOOD)
    restocked = models.BooleanField(default=False)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gt=0), name="chk_return_item_quantity_positive"),
        ]

    def clean(self):
        if self.sale_item_id and self.product_id and self.sale_item.product_id != self.product_id:
            raise ValidationError("Returned product does not match the sale item")

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product_id} x {self.quantity} ({self.condition})"
